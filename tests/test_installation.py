from __future__ import annotations

import logging

import pytest

from conftest import make_installation
from teamcity_sdk.errors import InstallationUnreadable
from teamcity_sdk.lib.installation import InstallationState, evaluate, looks_like_installation, probe


def test_missing_directory_is_bad(tmp_path) -> None:
    assert evaluate(tmp_path / "nope", "2021.1") is InstallationState.BAD


def test_empty_directory_is_bad(tmp_path) -> None:
    assert evaluate(tmp_path, "2021.1") is InstallationState.BAD


@pytest.mark.parametrize("version", ["2021.1", "2020.2", None])
def test_no_marker_is_bad_regardless_of_version(tmp_path, version) -> None:
    d = make_installation(tmp_path / "tc", version, marker=False)
    assert not looks_like_installation(d)
    assert evaluate(d, "2021.1") is InstallationState.BAD


def test_matching_version_is_good(tmp_path) -> None:
    d = make_installation(tmp_path / "tc", "2021.1")
    assert evaluate(d, "2021.1") is InstallationState.GOOD


def test_other_version_is_misversion(tmp_path) -> None:
    d = make_installation(tmp_path / "tc", "2020.2")
    assert probe(d, "2021.1") == (InstallationState.MISVERSION, "2020.2")


def test_version_compare_is_exact(tmp_path) -> None:
    d = make_installation(tmp_path / "tc", "2021.1.0")
    assert evaluate(d, "2021.1") is InstallationState.MISVERSION


def test_unreadable_version_fails_evaluation(tmp_path) -> None:
    d = make_installation(tmp_path / "tc", version=None)
    with pytest.raises(InstallationUnreadable):
        evaluate(d, "2021.1")


def test_classification_logged_at_debug(tmp_path, caplog) -> None:
    d = make_installation(tmp_path / "tc", "2020.2")
    with caplog.at_level(logging.DEBUG, logger="teamcity_sdk.lib.installation"):
        evaluate(d, "2021.1")
    assert any("MISVERSION" in r.getMessage() and r.levelno == logging.DEBUG for r in caplog.records)
