# src/services/codepipeline_service.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.services.errors import ExecutionStartError

logger = logging.getLogger(__name__)


class CodePipelineService:
    """Starts executions and reads pipeline declarations from CodePipeline."""

    def __init__(
        self,
        codepipeline_client: Any = None,
        *,
        region: Optional[str] = None,
        session_factory: Callable[..., boto3.Session] = boto3.Session,
    ) -> None:
        if codepipeline_client is not None:
            self._client = codepipeline_client
            return
        session_kwargs = {}
        if region:
            session_kwargs["region_name"] = region
        self._client = session_factory(**session_kwargs).client("codepipeline")

    def start_execution(self, pipeline_name: str) -> Optional[str]:
        # name only, the pipeline runs from its source stage as configured
        try:
            response = self._client.start_pipeline_execution(name=pipeline_name)
        except (ClientError, BotoCoreError) as e:
            logger.error("StartPipelineExecution failed for %s: %s", pipeline_name, e, exc_info=True)
            code = e.response.get("Error", {}).get("Code") if isinstance(e, ClientError) else None
            raise ExecutionStartError(
                f"Failed to start pipeline {pipeline_name}: {e}",
                pipeline_name=pipeline_name,
                error_code=code,
            ) from e
        return response.get("pipelineExecutionId")

    def get_declaration(self, pipeline_name: str) -> Dict[str, Any]:
        """Return the deployed pipeline structure (the `pipeline` key of GetPipeline)."""
        response = self._client.get_pipeline(name=pipeline_name)
        return response["pipeline"]
