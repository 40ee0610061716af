import pytest


@pytest.fixture
def aws_env(monkeypatch):
    """Fake credentials + region so boto3 clients never reach real AWS."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    for name in ("REGION", "AWS_REGION", "AWS_ENDPOINT_URL_CODECOMMIT", "AWS_ENDPOINT_URL_CODEPIPELINE"):
        monkeypatch.delenv(name, raising=False)
