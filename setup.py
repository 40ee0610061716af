from setuptools import setup, find_packages

setup(
    name="pkgpipe",  # package pipeline -> pkgpipe
    version="0.1.0",
    packages=find_packages(exclude=["src.tests", "src.tests.*"]),
    py_modules=["cli"],
    install_requires=[
        "boto3",
        "botocore",
    ],
    extras_require={
        "test": [
            "pytest",
            "moto>=5",
        ],
    },
    entry_points={
        'console_scripts': [
            'pkgpipe=cli:main',
        ],
    },
    author="ecaa",
    description="Commit-filtered lint/test/publish pipeline for CodeArtifact packages",
    python_requires='>=3.8',
)
