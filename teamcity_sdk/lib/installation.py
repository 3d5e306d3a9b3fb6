from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Optional, Tuple

from .version import read_version

logger = logging.getLogger(__name__)

# Checked on every host, Windows included.
MARKER_FILE = "bin/runAll.sh"


class InstallationState(enum.Enum):
    GOOD = "good"
    MISVERSION = "misversion"
    BAD = "bad"


def looks_like_installation(teamcity_dir: str | Path) -> bool:
    return (Path(teamcity_dir) / MARKER_FILE).exists()


def probe(teamcity_dir: str | Path, expected_version: str) -> Tuple[InstallationState, Optional[str]]:
    """Classify a directory and return the installed version when it was read.

    InstallationUnreadable from the version reader propagates.
    """

    d = Path(teamcity_dir)
    if not d.exists() or not looks_like_installation(d):
        logger.debug("%s: no %s, installation is bad", d, MARKER_FILE)
        return InstallationState.BAD, None

    installed = read_version(d)
    state = InstallationState.GOOD if installed == expected_version else InstallationState.MISVERSION
    logger.debug("%s: version %s, expected %s -> %s", d, installed, expected_version, state.name)
    return state, installed


def evaluate(teamcity_dir: str | Path, expected_version: str) -> InstallationState:
    state, _ = probe(teamcity_dir, expected_version)
    return state
