"""Tests for the main.py command-line interface."""

import json
import logging
from unittest.mock import patch

import pytest

from core.config import get_settings
from main import main


def test_policy_json(capsys):
    assert main(["policy", "--json"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["ignored"] == ["Ant [pattern='/h2-console/**']", "Ant [pattern='/favicon.ico']"]
    assert summary["chains"][0]["rules"] == ["any request -> permitAll"]


def test_policy_text(capsys):
    assert main(["policy"]) == 0
    out = capsys.readouterr().out
    assert "Ignored (no security filters):" in out
    assert "Chain 1: any request" in out


@pytest.mark.parametrize(
    ("method", "path", "verdict"),
    [
        ("get", "/h2-console/login.do", "IGNORED"),
        ("GET", "/favicon.ico", "IGNORED"),
        ("POST", "/api/v1/echo", "GRANTED"),
    ],
)
def test_check_verdicts(capsys, method, path, verdict):
    assert main(["check", method, path]) == 0
    assert f"-> {verdict}" in capsys.readouterr().out


def test_check_rejected_path_exits_nonzero(capsys):
    assert main(["check", "GET", "/h2-console/../admin"]) == 1
    assert "-> DENIED (rejected: path is not normalized)" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: jwt-tutorial" in capsys.readouterr().out


def test_cli_configures_formatted_logging_at_warning(capsys):
    with patch("main.logging.basicConfig") as basic_config:
        assert main(["check", "GET", "/favicon.ico"]) == 0
    basic_config.assert_called_once()
    kwargs = basic_config.call_args.kwargs
    assert kwargs["level"] == logging.WARNING
    assert kwargs["format"] == "%(asctime)s %(levelname)-5s %(name)s %(message)s"


def test_cli_verbose_uses_configured_log_level(capsys):
    with patch("main.logging.basicConfig") as basic_config:
        assert main(["-v", "policy", "--json"]) == 0
    assert basic_config.call_args.kwargs["level"] == get_settings().log_level
