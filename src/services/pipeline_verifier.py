# src/services/pipeline_verifier.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from src.pipeline.definition import STAGES, PipelineProps, Stage
from src.services.codepipeline_service import CodePipelineService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationReport:
    pipeline_name: str
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def _source_action(declaration: Dict[str, Any]) -> Dict[str, Any]:
    for stage in declaration.get("stages", []):
        if stage.get("name") != Stage.SOURCE.value:
            continue
        for action in stage.get("actions", []):
            if action.get("actionTypeId", {}).get("provider") == "CodeCommit":
                return action
    return {}


def verify_declaration(declaration: Dict[str, Any], props: PipelineProps) -> VerificationReport:
    """Compare a deployed pipeline structure with what `props` describes."""
    problems = []

    expected = [s.value for s in STAGES]
    actual = [s.get("name") for s in declaration.get("stages", [])]
    if actual != expected:
        problems.append(f"stages are {actual}, expected {expected}")

    action = _source_action(declaration)
    if not action:
        problems.append("no CodeCommit source action in the Source stage")
    else:
        config = action.get("configuration", {})
        branch = config.get("BranchName")
        if branch != props.release_branch:
            problems.append(f"source branch is {branch!r}, expected {props.release_branch!r}")
        # CodePipeline polls when the key is absent
        if str(config.get("PollForSourceChanges", "true")).lower() != "false":
            problems.append("source action polls for changes; runs must only be started by the commit filter")

    return VerificationReport(pipeline_name=props.name, problems=problems)


def verify_pipeline(service: CodePipelineService, props: PipelineProps) -> VerificationReport:
    declaration = service.get_declaration(props.name)
    report = verify_declaration(declaration, props)
    if report.ok:
        logger.info("Pipeline %s matches its definition", props.name)
    else:
        logger.warning("Pipeline %s drifted: %s", props.name, "; ".join(report.problems))
    return report
