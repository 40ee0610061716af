# src/models/commit.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional
import json

from src.services.errors import InvalidEventError


# Branch head change as delivered by EventBridge for CodeCommit
@dataclass(frozen=True)
class ChangeEvent:
    repository_name: str      # detail["repositoryName"]
    commit_id: str            # detail["commitId"]
    reference_name: Optional[str] = None  # log context only

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "ChangeEvent":
        """
        Build a ChangeEvent from an EventBridge envelope. Fields other than
        repositoryName / commitId / referenceName are ignored.
        """
        detail = (event or {}).get("detail") or {}
        repository_name = detail.get("repositoryName")
        commit_id = detail.get("commitId")
        if not repository_name or not commit_id:
            raise InvalidEventError(
                "event detail must contain repositoryName and commitId, "
                f"got keys: {sorted(detail)}"
            )
        return cls(
            repository_name=repository_name,
            commit_id=commit_id,
            reference_name=detail.get("referenceName"),
        )


# Subset of GetCommit we care about
@dataclass(frozen=True)
class CommitMetadata:
    commit_id: Optional[str] = None
    message: Optional[str] = None
    author_name: Optional[str] = None
    parents: List[str] = field(default_factory=list)

    @classmethod
    def from_aws_response(cls, response: Dict[str, Any]) -> "CommitMetadata":
        commit = response.get("commit") or {}
        author = commit.get("author") or {}
        return cls(
            commit_id=commit.get("commitId"),
            message=commit.get("message"),
            author_name=author.get("name"),
            parents=list(commit.get("parents") or []),
        )


class TriggerDecision(str, Enum):
    STARTED = "started"
    SKIPPED_BY_MARKER = "skipped_by_marker"


# What one gate invocation did
@dataclass(frozen=True)
class GateResult:
    decision: TriggerDecision
    pipeline_name: str
    repository_name: str
    commit_id: str
    execution_id: Optional[str] = None

    @property
    def started(self) -> bool:
        return self.decision is TriggerDecision.STARTED

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["decision"] = self.decision.value
        return out

    def to_json(self, pretty: bool = False) -> str:
        if pretty:
            return json.dumps(self.to_dict(), indent=2)
        return json.dumps(self.to_dict(), separators=(",", ":"))


__all__ = ["ChangeEvent", "CommitMetadata", "TriggerDecision", "GateResult"]
