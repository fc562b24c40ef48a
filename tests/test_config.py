"""Tests for configuration and credential lookup."""
import logging

import pytest

from review_leaderboard.domain.errors import ConfigurationError
from review_leaderboard.infrastructure import config


@pytest.mark.parametrize(
    "value, expected",
    [
        ("DEBUG", logging.DEBUG),
        ("WARN", logging.WARNING),
        ("ERROR", logging.ERROR),
        ("INFO", logging.INFO),
        ("debug", logging.DEBUG),
        ("VERBOSE", logging.INFO),
    ],
)
def test_log_level(monkeypatch, value, expected):
    monkeypatch.setenv("LOG_LEVEL", value)

    assert config.get_log_level() == expected


def test_log_level_defaults_to_info(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    assert config.get_log_level() == logging.INFO


def test_api_base_url():
    assert config.api_base_url("github.com") == "https://api.github.com"
    assert config.api_base_url("git.example.com") == "https://git.example.com/api/v3"


def test_token_from_environment(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "gh-token")
    monkeypatch.setenv("GITHUB_TOKEN", "github-token")

    assert config.get_token("github.com") == "gh-token"

    monkeypatch.delenv("GH_TOKEN")
    assert config.get_token("github.com") == "github-token"


def test_missing_token_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("GH_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(config.shutil, "which", lambda name: None)

    with pytest.raises(ConfigurationError) as excinfo:
        config.get_token("git.example.com")

    assert "git.example.com" in str(excinfo.value)


def test_token_from_gh_cli(monkeypatch):
    monkeypatch.delenv("GH_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(config.shutil, "which", lambda name: "/usr/bin/gh")
    calls = []

    class Completed:
        returncode = 0
        stdout = "cli-token\n"

    def fake_run(args, **kwargs):
        calls.append(args)
        return Completed()

    monkeypatch.setattr(config.subprocess, "run", fake_run)

    assert config.get_token("github.com") == "cli-token"
    assert calls == [["gh", "auth", "token", "--hostname", "github.com"]]
