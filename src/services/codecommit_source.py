# src/services/codecommit_source.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.models.commit import CommitMetadata
from src.services.errors import MetadataLookupError

logger = logging.getLogger(__name__)


def _error_code(e: Exception) -> Optional[str]:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Code")
    return None


class CodeCommitMetadataSource:
    """Reads commit metadata with codecommit:GetCommit."""

    def __init__(
        self,
        codecommit_client: Any = None,
        *,
        region: Optional[str] = None,
        session_factory: Callable[..., boto3.Session] = boto3.Session,
    ) -> None:
        if codecommit_client is not None:
            self._client = codecommit_client
            return
        session_kwargs = {}
        if region:
            session_kwargs["region_name"] = region
        self._client = session_factory(**session_kwargs).client("codecommit")

    def get_commit(self, repository_name: str, commit_id: str) -> CommitMetadata:
        try:
            response = self._client.get_commit(repositoryName=repository_name, commitId=commit_id)
        except (ClientError, BotoCoreError) as e:
            logger.error("GetCommit failed for %s@%s: %s", repository_name, commit_id, e, exc_info=True)
            raise MetadataLookupError(
                f"Failed to get commit {commit_id} from {repository_name}: {e}",
                repository_name=repository_name,
                commit_id=commit_id,
                error_code=_error_code(e),
            ) from e
        return CommitMetadata.from_aws_response(response)
