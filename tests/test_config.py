from __future__ import annotations

import pytest

from github_signer.config import SignerConfig, load_config


def test_defaults_without_environment() -> None:
    cfg = load_config({})
    assert cfg == SignerConfig()
    assert cfg.token is None
    assert cfg.timeout_seconds == 30
    assert cfg.tip_source == "remote"
    assert cfg.strict_refresh is True


def test_values_are_read_from_environment() -> None:
    cfg = load_config(
        {
            "GITHUB_TOKEN": "tok",
            "GITHUB_API_URL": "https://ghe.example.com/api/v3/",
            "SIGNER_TIMEOUT_SECONDS": "5",
            "SIGNER_BASE_BRANCH": "develop",
            "SIGNER_TIP_SOURCE": "LOCAL",
            "SIGNER_STRICT_REFRESH": "false",
        }
    )
    assert cfg.token == "tok"
    assert cfg.api_url == "https://ghe.example.com/api/v3"
    assert cfg.timeout_seconds == 5
    assert cfg.base_branch == "develop"
    assert cfg.tip_source == "local"
    assert cfg.strict_refresh is False


def test_bad_timeout_falls_back_to_default() -> None:
    assert load_config({"SIGNER_TIMEOUT_SECONDS": "soon"}).timeout_seconds == 30


def test_unknown_tip_source_is_rejected() -> None:
    with pytest.raises(ValueError):
        load_config({"SIGNER_TIP_SOURCE": "guess"})
