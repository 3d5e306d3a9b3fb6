from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..config import SdkConfig
from ..logging_utils import LogSink

logger = logging.getLogger(__name__)


def effective_data_dir(cfg: SdkConfig) -> Path:
    """Absolute data directory: as configured, or relative to the installation."""

    d = Path(cfg.data_directory)
    if d.is_absolute():
        return d
    return (cfg.teamcity_dir / d).absolute()


def deploy_plugin(cfg: SdkConfig, *, log: LogSink = logger) -> Path:
    """Copy the built plugin package into <data dir>/plugins.

    A missing package is only warned about; the data directory is returned either way.
    """

    data_dir = effective_data_dir(cfg)
    package = cfg.build_directory / cfg.plugin_package_name

    if not package.exists():
        log.warning(
            "Target file [%s] does not exist. Nothing will be deployed. Did you forget 'package' goal?",
            package.absolute(),
        )
        return data_dir

    out = data_dir / "plugins" / cfg.plugin_package_name
    out.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(package, out)
    log.info("Deployed %s -> %s", package, out)
    return data_dir
