import json

import pytest

from src.models.commit import ChangeEvent, CommitMetadata, GateResult, TriggerDecision
from src.services.errors import InvalidEventError


REFERENCE_UPDATED = {
    "version": "0",
    "id": "01234567-0123-0123-0123-012345678901",
    "detail-type": "CodeCommit Repository State Change",
    "source": "aws.codecommit",
    "account": "123456789012",
    "time": "2022-07-01T12:00:00Z",
    "region": "us-east-1",
    "resources": ["arn:aws:codecommit:us-east-1:123456789012:my-pkg"],
    "detail": {
        "callerUserArn": "arn:aws:iam::123456789012:user/dev",
        "commitId": "3e5983e0aEXAMPLE",
        "event": "referenceUpdated",
        "oldCommitId": "3b9d6ce2EXAMPLE",
        "referenceFullName": "refs/heads/main",
        "referenceName": "main",
        "referenceType": "branch",
        "repositoryId": "12345678-1234-5678-abcd-12345678abcd",
        "repositoryName": "my-pkg",
    },
}


def test_change_event_from_eventbridge():
    ev = ChangeEvent.from_event(REFERENCE_UPDATED)
    assert ev == ChangeEvent(repository_name="my-pkg", commit_id="3e5983e0aEXAMPLE", reference_name="main")


@pytest.mark.parametrize("detail", [
    {},
    {"repositoryName": "my-pkg"},
    {"commitId": "abc"},
    {"repositoryName": "", "commitId": "abc"},
])
def test_change_event_requires_repo_and_commit(detail):
    with pytest.raises(InvalidEventError):
        ChangeEvent.from_event({"detail": detail})


def test_change_event_without_detail():
    with pytest.raises(ValueError):
        ChangeEvent.from_event({})


def test_commit_metadata_from_get_commit():
    response = {
        "commit": {
            "commitId": "c1",
            "treeId": "t1",
            "parents": ["p1"],
            "message": "chore(release): 1.2.0 [skip ci]\n\n## 1.2.0\n",
            "author": {"name": "semantic-release-bot", "email": "bot@example.com", "date": "1656676800 +0000"},
            "committer": {"name": "semantic-release-bot", "email": "bot@example.com", "date": "1656676800 +0000"},
            "additionalData": "",
        },
        "ResponseMetadata": {"HTTPStatusCode": 200},
    }
    meta = CommitMetadata.from_aws_response(response)
    assert meta.commit_id == "c1"
    assert meta.message.startswith("chore(release)")
    assert meta.author_name == "semantic-release-bot"
    assert meta.parents == ["p1"]


def test_commit_metadata_tolerates_missing_fields():
    meta = CommitMetadata.from_aws_response({})
    assert meta.message is None
    assert meta.parents == []


def test_gate_result_json():
    result = GateResult(
        decision=TriggerDecision.SKIPPED_BY_MARKER,
        pipeline_name="p",
        repository_name="r",
        commit_id="c",
    )
    assert json.loads(result.to_json()) == {
        "decision": "skipped_by_marker",
        "pipeline_name": "p",
        "repository_name": "r",
        "commit_id": "c",
        "execution_id": None,
    }
    assert not result.started
