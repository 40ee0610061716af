from src.lambdas.commit_filter.app import lambda_handler
from src.pipeline.definition import PipelineProps, synthesize
from src.services.codepipeline_service import CodePipelineService
from src.services.commit_filter import should_skip
from src.services.pipeline_verifier import verify_pipeline
import boto3
import json
import logging
import os
import argparse
import sys


# run pip install -e .
# then do your thing
def _save_to_json(data: dict, filename: str) -> bool:
    try:
        with open(filename, 'w') as f:
            json.dump(data, f, indent=2, default=str)
        return True
    except OSError as e:
        print(f"An error occured saving json: {e}")
        return False


def _props(args) -> PipelineProps:
    return PipelineProps(
        name=args.name,
        code_artifact_domain=args.domain,
        code_artifact_repo=args.repo,
        code_artifact_namespace=args.namespace,
        release_branch=args.branch,
    )


def check_message(args):
    """
    print whether a commit message would start the pipeline
    """
    print("skip" if should_skip(args.message) else "trigger")


def invoke(args):
    """
    run the commit filter lambda locally against a saved EventBridge event
    """
    previous = os.environ.get("PIPELINE_NAME")
    if args.pipeline_name:
        os.environ["PIPELINE_NAME"] = args.pipeline_name
    try:
        with open(args.event) as f:
            event = json.load(f)
        result = lambda_handler(event, None)
    except Exception as e:
        print(f"An error ocurred invoking the commit filter: {e}")
        sys.exit(1)
    finally:
        # the override only applies to this invocation
        if args.pipeline_name:
            if previous is None:
                os.environ.pop("PIPELINE_NAME", None)
            else:
                os.environ["PIPELINE_NAME"] = previous
    print(json.dumps(result, indent=2))


def _account_id(region) -> str:
    session = boto3.Session(region_name=region) if region else boto3.Session()
    return session.client("sts").get_caller_identity()["Account"]


def synth(args):
    """
    write the pipeline definition (buildspecs, rule pattern, IAM) to json
    """
    if bool(args.role_arn) != bool(args.artifact_bucket):
        print("--role-arn and --artifact-bucket must be given together")
        sys.exit(1)

    try:
        props = _props(args)
        # default to the caller's account rather than a placeholder
        account_id = args.account or _account_id(args.region)
        doc = synthesize(
            props,
            region=args.region,
            account_id=account_id,
            role_arn=args.role_arn,
            artifact_bucket=args.artifact_bucket,
        )
    except Exception as e:
        print(f"An error ocurred synthesizing the pipeline: {e}")
        sys.exit(1)

    output_file = args.output or 'pipeline.json'
    if not _save_to_json(doc, output_file):
        sys.exit(1)
    print(f"Wrote pipeline definition for {args.name} to {output_file}")


def verify(args):
    """
    compare the deployed pipeline against its definition
    """
    try:
        report = verify_pipeline(CodePipelineService(region=args.region), _props(args))
    except Exception as e:
        print(f"An error ocurred fetching pipeline {args.name}: {e}")
        sys.exit(1)

    if report.ok:
        print(f"Pipeline {report.pipeline_name} matches its definition")
        return
    for problem in report.problems:
        print(f"- {problem}")
    sys.exit(1)


def _add_pipeline_args(sub):
    sub.add_argument('--name', required=True, help='Repository and pipeline name')
    sub.add_argument('--domain', required=True, help='CodeArtifact domain')
    sub.add_argument('--repo', required=True, help='CodeArtifact repository')
    sub.add_argument('--namespace', required=True, help='CodeArtifact namespace (npm scope)')
    sub.add_argument('--branch', default='main', help='Release branch (default: main)')


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    parser = argparse.ArgumentParser(
        prog='pkgpipe',
        description='Lint, test and publish pipeline for CodeArtifact '
        '          packages, started by a commit filter that skips '
        '          release commits marked [skip ci]'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Available commands'
    )

    check_parser = subparsers.add_parser(
        'check-message',
        help='Tell whether a commit message would start the pipeline'
    )
    check_parser.add_argument('message', help='Commit message')
    check_parser.set_defaults(func=check_message)

    invoke_parser = subparsers.add_parser(
        'invoke',
        help='Run the commit filter locally against an event file'
    )
    invoke_parser.add_argument('--event', '-e', required=True, help='EventBridge event json file')
    invoke_parser.add_argument('--pipeline-name', help='Overrides PIPELINE_NAME')
    invoke_parser.set_defaults(func=invoke)

    synth_parser = subparsers.add_parser(
        'synth',
        help='Write the pipeline definition as json'
    )
    _add_pipeline_args(synth_parser)
    synth_parser.add_argument('--region', default=os.environ.get('AWS_REGION', 'us-east-1'))
    synth_parser.add_argument('--account', help='AWS account id used in ARNs (default: caller account from STS)')
    synth_parser.add_argument('--role-arn', help='Pipeline service role, adds the pipeline declaration')
    synth_parser.add_argument('--artifact-bucket', help='Pipeline artifact bucket, adds the pipeline declaration')
    synth_parser.add_argument(
        '--output',
        '-o',
        help='Output file name (default: pipeline.json)'
    )
    synth_parser.set_defaults(func=synth)

    verify_parser = subparsers.add_parser(
        'verify',
        help='Check the deployed pipeline against its definition'
    )
    _add_pipeline_args(verify_parser)
    verify_parser.add_argument('--region', default=None)
    verify_parser.set_defaults(func=verify)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    # execute the passed function
    args.func(args)


if __name__ == '__main__':
    main()
