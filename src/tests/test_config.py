import logging

import pytest

from src.config import GateConfig, load_config
from src.services.errors import ConfigurationError


def test_reads_pipeline_name_and_region():
    cfg = load_config({"PIPELINE_NAME": "pkg", "REGION": "eu-west-1", "AWS_REGION": "us-east-1"})
    assert cfg == GateConfig(pipeline_name="pkg", region="eu-west-1", log_level="INFO")


def test_region_falls_back_to_ambient():
    assert load_config({"PIPELINE_NAME": "pkg", "AWS_REGION": "us-west-2"}).region == "us-west-2"
    assert load_config({"PIPELINE_NAME": "pkg", "AWS_DEFAULT_REGION": "ap-south-1"}).region == "ap-south-1"
    assert load_config({"PIPELINE_NAME": "pkg"}).region is None


@pytest.mark.parametrize("env", [{}, {"PIPELINE_NAME": ""}, {"PIPELINE_NAME": "   "}])
def test_pipeline_name_required(env):
    with pytest.raises(ConfigurationError):
        load_config(env)


def test_log_level():
    assert load_config({"PIPELINE_NAME": "pkg", "LOG_LEVEL": "debug"}).log_level == "DEBUG"
    assert load_config({"PIPELINE_NAME": "pkg", "LOG_LEVEL": "warn"}).log_level == "WARN"
    assert load_config({"PIPELINE_NAME": "pkg"}).log_level == "INFO"


def test_unknown_log_level_falls_back_to_info(caplog):
    with caplog.at_level(logging.WARNING, logger="src.config"):
        cfg = load_config({"PIPELINE_NAME": "pkg", "LOG_LEVEL": "chatty"})

    assert cfg.log_level == "INFO"
    assert "Unknown LOG_LEVEL 'CHATTY'" in caplog.text


def test_reads_os_environ_at_call_time(monkeypatch):
    monkeypatch.setenv("PIPELINE_NAME", "first")
    assert load_config().pipeline_name == "first"
    monkeypatch.setenv("PIPELINE_NAME", "second")
    assert load_config().pipeline_name == "second"
