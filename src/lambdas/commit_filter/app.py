# src/lambdas/commit_filter/app.py
import json
import logging

# import modules (so tests can monkeypatch attributes)
from . import aws_clients
from src.config import load_config
from src.models.commit import ChangeEvent
from src.services.codecommit_source import CodeCommitMetadataSource
from src.services.codepipeline_service import CodePipelineService
from src.services.commit_filter import TriggerGate

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event, context):
    """
    Target of the CodeCommit "commit to release branch" EventBridge rule.
    Expected event (other fields ignored):
    {
        "source": "aws.codecommit",
        "detail-type": "CodeCommit Repository State Change",
        "detail": {"repositoryName": "...", "commitId": "...", "referenceName": "main"}
    }
    Starts PIPELINE_NAME unless the commit message contains [skip ci].
    Errors are not caught; the invocation fails and EventBridge retries.
    """
    logger.info("Received event: %s", json.dumps(event, default=str))

    # fail before touching the network when misconfigured
    config = load_config()
    logger.setLevel(config.log_level)
    change = ChangeEvent.from_event(event)

    gate = TriggerGate(
        metadata_source=CodeCommitMetadataSource(aws_clients.codecommit(config.region)),
        starter=CodePipelineService(aws_clients.codepipeline(config.region)),
        pipeline_name=config.pipeline_name,
    )
    result = gate.handle(change)
    logger.info("Gate result: %s", result.to_json())
    return result.to_dict()
