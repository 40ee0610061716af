# src/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from src.services.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _region(environ: Mapping[str, str]) -> Optional[str]:
    # None lets boto3 fall back to its own config chain
    return environ.get("REGION") or environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION") or None


def _log_level(environ: Mapping[str, str]) -> str:
    level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
    # getLevelName returns an int only for names logging knows (WARN included)
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Unknown LOG_LEVEL %r, using INFO", level)
        return "INFO"
    return level


@dataclass(frozen=True)
class GateConfig:
    pipeline_name: str
    region: Optional[str] = None
    log_level: str = "INFO"


def load_config(environ: Optional[Mapping[str, str]] = None) -> GateConfig:
    """Read the gate configuration from the environment at call time."""
    env = os.environ if environ is None else environ
    pipeline_name = (env.get("PIPELINE_NAME") or "").strip()
    if not pipeline_name:
        raise ConfigurationError("PIPELINE_NAME env var is required")
    return GateConfig(
        pipeline_name=pipeline_name,
        region=_region(env),
        log_level=_log_level(env),
    )
