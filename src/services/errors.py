# src/services/errors.py
from __future__ import annotations

from typing import Optional


class PipelineTriggerError(RuntimeError):
    """Base class for everything the trigger gate raises on purpose."""


class ConfigurationError(PipelineTriggerError):
    """Required configuration is missing. Fatal, retrying will not help."""


class InvalidEventError(PipelineTriggerError, ValueError):
    """The inbound event does not carry a repository name and commit id."""


class MetadataLookupError(PipelineTriggerError):
    """Raised when the commit could not be read from CodeCommit."""

    def __init__(
        self,
        message: str,
        *,
        repository_name: str,
        commit_id: str,
        error_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.repository_name = repository_name
        self.commit_id = commit_id
        self.error_code = error_code


class ExecutionStartError(PipelineTriggerError):
    """Raised when CodePipeline rejects or fails the start request."""

    def __init__(self, message: str, *, pipeline_name: str, error_code: Optional[str] = None) -> None:
        super().__init__(message)
        self.pipeline_name = pipeline_name
        self.error_code = error_code


__all__ = [
    "PipelineTriggerError",
    "ConfigurationError",
    "InvalidEventError",
    "MetadataLookupError",
    "ExecutionStartError",
]
