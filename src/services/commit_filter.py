# src/services/commit_filter.py
from __future__ import annotations

import logging
from typing import Optional, Protocol

from src.Keywords import Keywords
from src.models.commit import ChangeEvent, CommitMetadata, GateResult, TriggerDecision
from src.services.errors import ConfigurationError

logger = logging.getLogger(__name__)

SKIP_CI_MARKER = Keywords.SKIP_CI_MARKER.value


def should_skip(message: Optional[str]) -> bool:
    """
    True when the commit message carries the [skip ci] marker.
    Case-sensitive substring match; a missing message never skips.
    """
    return message is not None and SKIP_CI_MARKER in message


class CommitMetadataSource(Protocol):
    def get_commit(self, repository_name: str, commit_id: str) -> CommitMetadata:
        ...


class ExecutionStarter(Protocol):
    def start_execution(self, pipeline_name: str) -> Optional[str]:
        ...


class TriggerGate:
    """
    Decides whether a branch update should start the pipeline. Commits made by
    the publish stage carry [skip ci] and are absorbed here so the pipeline
    does not re-trigger itself.
    """

    def __init__(
        self,
        metadata_source: CommitMetadataSource,
        starter: ExecutionStarter,
        pipeline_name: Optional[str],
    ) -> None:
        if not pipeline_name:
            raise ConfigurationError("pipeline_name is required")
        self._metadata_source = metadata_source
        self._starter = starter
        self.pipeline_name = pipeline_name

    def handle(self, event: ChangeEvent) -> GateResult:
        # lookup errors propagate, nothing is started
        commit = self._metadata_source.get_commit(event.repository_name, event.commit_id)

        if should_skip(commit.message):
            logger.info(
                "not triggering pipeline due to %s in commit message (%s@%s)",
                SKIP_CI_MARKER, event.repository_name, event.commit_id,
            )
            return GateResult(
                decision=TriggerDecision.SKIPPED_BY_MARKER,
                pipeline_name=self.pipeline_name,
                repository_name=event.repository_name,
                commit_id=event.commit_id,
            )

        logger.info("triggering pipeline %s for %s@%s", self.pipeline_name, event.repository_name, event.commit_id)
        execution_id = self._starter.start_execution(self.pipeline_name)
        logger.info("pipeline %s started, execution id: %s", self.pipeline_name, execution_id)
        return GateResult(
            decision=TriggerDecision.STARTED,
            pipeline_name=self.pipeline_name,
            repository_name=event.repository_name,
            commit_id=event.commit_id,
            execution_id=execution_id,
        )


__all__ = ["SKIP_CI_MARKER", "should_skip", "CommitMetadataSource", "ExecutionStarter", "TriggerGate"]
