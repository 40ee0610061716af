# src/pipeline/definition.py
"""
Declarative description of the package pipeline the commit filter drives:

  CodeCommit repo --(EventBridge rule)--> commit filter lambda --> CodePipeline
  CodePipeline: Source -> Lint -> Test -> Publish (CodeBuild, CodeArtifact)

Nothing here talks to AWS. The output is plain dicts/JSON that match the
shapes the AWS APIs use, so they can be diffed against what is deployed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from src.Keywords import Keywords
from src.services.errors import ConfigurationError

DEFAULT_BUILD_IMAGE = "aws/codebuild/standard:5.0"
DEFAULT_COMPUTE_TYPE = "BUILD_GENERAL1_MEDIUM"
SOURCE_ARTIFACT = "SourceOutput"

DEFAULT_PRE_BUILD_COMMANDS = ["npm install"]
DEFAULT_LINT_COMMANDS = ["npm run lint"]
DEFAULT_TEST_COMMANDS = ["npm run test"]
DEFAULT_BUILD_COMMANDS = ["npm run build"]
DEFAULT_RELEASE_COMMANDS = ["npx semantic-release"]


class Stage(str, Enum):
    SOURCE = "Source"
    LINT = "Lint"
    TEST = "Test"
    PUBLISH = "Publish"


STAGES = [Stage.SOURCE, Stage.LINT, Stage.TEST, Stage.PUBLISH]
BUILD_STAGES = [Stage.LINT, Stage.TEST, Stage.PUBLISH]


# None means "use the default", an explicit [] is kept as-is
@dataclass
class StageCommands:
    install: Optional[List[str]] = None
    pre_build: Optional[List[str]] = None
    build: Optional[List[str]] = None
    post_build: Optional[List[str]] = None

    def phases(self) -> Dict[str, Dict[str, List[str]]]:
        out = {}
        for phase in ("install", "pre_build", "build", "post_build"):
            commands = getattr(self, phase)
            if commands is not None:
                out[phase] = {"commands": list(commands)}
        return out


@dataclass
class PipelineProps:
    name: str
    code_artifact_domain: str
    code_artifact_repo: str
    code_artifact_namespace: str
    repo_description: Optional[str] = None
    release_branch: str = "main"
    build_image: str = DEFAULT_BUILD_IMAGE
    compute_type: str = DEFAULT_COMPUTE_TYPE
    lint_commands: StageCommands = field(default_factory=StageCommands)
    test_commands: StageCommands = field(default_factory=StageCommands)
    release_commands: StageCommands = field(default_factory=StageCommands)
    global_install_commands: Optional[List[str]] = None
    global_pre_build_commands: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("name must be defined")
        if not self.code_artifact_domain or not self.code_artifact_repo or not self.code_artifact_namespace:
            raise ConfigurationError(
                "code_artifact_domain, code_artifact_repo, and code_artifact_namespace must be defined"
            )

    @property
    def install_commands(self) -> List[str]:
        if self.global_install_commands is not None:
            return self.global_install_commands
        return [
            "npm install -g npm@7",
            f"aws codeartifact login --tool npm --domain {self.code_artifact_domain} "
            f"--repository {self.code_artifact_repo} --namespace {self.code_artifact_namespace}",
        ]

    @property
    def pre_build_commands(self) -> List[str]:
        if self.global_pre_build_commands is not None:
            return self.global_pre_build_commands
        return DEFAULT_PRE_BUILD_COMMANDS

    def project_name(self, stage: Stage) -> str:
        return f"{self.name}-{stage.value.lower()}"


def _pick(value: Optional[List[str]], default: Optional[List[str]]) -> Optional[List[str]]:
    return default if value is None else value


def resolved_commands(props: PipelineProps, stage: Stage) -> StageCommands:
    """Fill in the global install/pre_build commands and the stage's default build commands."""
    if stage is Stage.LINT:
        given, build, post_build = props.lint_commands, DEFAULT_LINT_COMMANDS, None
    elif stage is Stage.TEST:
        given, build, post_build = props.test_commands, DEFAULT_TEST_COMMANDS, None
    elif stage is Stage.PUBLISH:
        given, build, post_build = props.release_commands, DEFAULT_BUILD_COMMANDS, DEFAULT_RELEASE_COMMANDS
    else:
        raise ValueError(f"{stage.value} stage has no build commands")
    return StageCommands(
        install=_pick(given.install, props.install_commands),
        pre_build=_pick(given.pre_build, props.pre_build_commands),
        build=_pick(given.build, build),
        post_build=_pick(given.post_build, post_build),
    )


def buildspec(props: PipelineProps, stage: Stage) -> Dict[str, Any]:
    spec: Dict[str, Any] = {"version": "0.2"}
    if stage is Stage.PUBLISH:
        # the release tool pushes the version bump commit back with git
        spec["env"] = {"git-credential-helper": "yes"}
    spec["phases"] = resolved_commands(props, stage).phases()
    return spec


# ---- ARNs ----

def _arn(partition: str, service: str, region: str, account_id: str, resource: str) -> str:
    return f"arn:{partition}:{service}:{region}:{account_id}:{resource}"


def repository_arn(props: PipelineProps, region: str, account_id: str, partition: str = "aws") -> str:
    return _arn(partition, "codecommit", region, account_id, props.name)


def pipeline_arn(props: PipelineProps, region: str, account_id: str, partition: str = "aws") -> str:
    return _arn(partition, "codepipeline", region, account_id, props.name)


# ---- EventBridge ----

def commit_rule_pattern(props: PipelineProps, repo_arn: str) -> Dict[str, Any]:
    """Pattern for commits to the release branch; targets the commit filter lambda."""
    return {
        "source": [Keywords.CODECOMMIT_SOURCE.value],
        "resources": [repo_arn],
        "detail-type": [Keywords.REPOSITORY_STATE_CHANGE.value],
        "detail": {
            "event": [Keywords.REFERENCE_CREATED.value, Keywords.REFERENCE_UPDATED.value],
            "referenceName": [props.release_branch],
        },
    }


# ---- IAM ----

def _statement(actions: List[str], resources: List[str], conditions: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    stmt: Dict[str, Any] = {"Effect": "Allow", "Action": actions, "Resource": resources}
    if conditions:
        stmt["Condition"] = conditions
    return stmt


def commit_filter_statements(repo_arn: str, pipe_arn: str) -> List[Dict[str, Any]]:
    return [
        _statement(["codecommit:GetCommit"], [repo_arn]),
        _statement(["codepipeline:StartPipelineExecution"], [pipe_arn]),
    ]


def codeartifact_read_statements(
    props: PipelineProps, region: str, account_id: str, partition: str = "aws"
) -> List[Dict[str, Any]]:
    """What every CodeBuild project needs for `aws codeartifact login` and installs."""
    domain = props.code_artifact_domain
    return [
        _statement(
            ["sts:GetServiceBearerToken"],
            ["*"],
            {"StringEquals": {"sts:AWSServiceName": "codeartifact.amazonaws.com"}},
        ),
        _statement(
            ["codeartifact:GetAuthorizationToken"],
            [_arn(partition, "codeartifact", region, account_id, f"domain/{domain}")],
        ),
        _statement(
            ["codeartifact:GetRepositoryEndpoint", "codeartifact:ReadFromRepository"],
            [_arn(partition, "codeartifact", region, account_id, f"repository/{domain}/{props.code_artifact_repo}")],
        ),
    ]


def publish_statements(
    props: PipelineProps, repo_arn: str, region: str, account_id: str, partition: str = "aws"
) -> List[Dict[str, Any]]:
    # IAM rejects '@' so the npm scope cannot narrow the package resource
    package = f"package/{props.code_artifact_domain}/{props.code_artifact_repo}/npm/*"
    return [
        _statement(
            ["codeartifact:PublishPackageVersion"],
            [_arn(partition, "codeartifact", region, account_id, package)],
        ),
        _statement(
            ["codecommit:GitPull", "codecommit:GetReferences", "codecommit:GitPush", "codecommit:TagResource"],
            [repo_arn],
        ),
    ]


# ---- CodePipeline ----

def _build_action(props: PipelineProps, stage: Stage) -> Dict[str, Any]:
    category = "Build" if stage is Stage.PUBLISH else "Test"
    return {
        "name": stage.value,
        "actionTypeId": {"category": category, "owner": "AWS", "provider": "CodeBuild", "version": "1"},
        "configuration": {"ProjectName": props.project_name(stage)},
        "inputArtifacts": [{"name": SOURCE_ARTIFACT}],
        "runOrder": 1,
    }


def pipeline_declaration(props: PipelineProps, role_arn: str, artifact_bucket: str) -> Dict[str, Any]:
    """The `pipeline` structure as CreatePipeline takes it and GetPipeline returns it."""
    source_action = {
        "name": "CodeCommit",
        "actionTypeId": {"category": "Source", "owner": "AWS", "provider": "CodeCommit", "version": "1"},
        "configuration": {
            "RepositoryName": props.name,
            "BranchName": props.release_branch,
            # started by the commit filter only
            "PollForSourceChanges": "false",
            # full clone, the release tool needs git history
            "OutputArtifactFormat": "CODEBUILD_CLONE_REF",
        },
        "outputArtifacts": [{"name": SOURCE_ARTIFACT}],
        "runOrder": 1,
    }
    stages = [{"name": Stage.SOURCE.value, "actions": [source_action]}]
    stages += [{"name": stage.value, "actions": [_build_action(props, stage)]} for stage in BUILD_STAGES]
    return {
        "name": props.name,
        "roleArn": role_arn,
        "artifactStore": {"type": "S3", "location": artifact_bucket},
        "stages": stages,
    }


def synthesize(
    props: PipelineProps,
    region: str,
    account_id: str,
    *,
    partition: str = "aws",
    role_arn: Optional[str] = None,
    artifact_bucket: Optional[str] = None,
) -> Dict[str, Any]:
    """Everything above in one JSON-serializable document."""
    if bool(role_arn) != bool(artifact_bucket):
        raise ConfigurationError("role_arn and artifact_bucket must be given together")
    repo_arn = repository_arn(props, region, account_id, partition)
    pipe_arn = pipeline_arn(props, region, account_id, partition)
    read_statements = codeartifact_read_statements(props, region, account_id, partition)

    projects = {}
    for stage in BUILD_STAGES:
        statements = list(read_statements)
        if stage is Stage.PUBLISH:
            statements += publish_statements(props, repo_arn, region, account_id, partition)
        projects[stage.value] = {
            "name": props.project_name(stage),
            "environment": {"image": props.build_image, "computeType": props.compute_type},
            "buildspec": buildspec(props, stage),
            "policyStatements": statements,
        }

    doc: Dict[str, Any] = {
        "repository": {"name": props.name, "description": props.repo_description, "arn": repo_arn},
        "pipeline": {"name": props.name, "arn": pipe_arn, "stages": [s.value for s in STAGES]},
        "commitFilter": {
            "environment": {"PIPELINE_NAME": props.name, "REGION": region},
            "eventPattern": commit_rule_pattern(props, repo_arn),
            "policyStatements": commit_filter_statements(repo_arn, pipe_arn),
        },
        "projects": projects,
    }
    if role_arn and artifact_bucket:
        doc["pipeline"]["declaration"] = pipeline_declaration(props, role_arn, artifact_bucket)
    return doc
