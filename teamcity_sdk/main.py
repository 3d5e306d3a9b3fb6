from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

from .config import DEFAULT_CONFIG_PATH, load_sdk_config
from .errors import TeamCitySdkError
from .lib.download import retriever_for
from .lifecycle import GOALS, GoalCtx, goal_ids, run_goal
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "teamcity_version": args.teamcity_version,
        "teamcity_dir": args.teamcity_dir,
        "data_directory": args.data_dir,
        "build_directory": args.build_dir,
        "plugin_package_name": args.package,
        "download_quietly": True if args.quiet else None,
        "start_agent": False if args.server_only else None,
    }


def run(
    goal_id: str,
    *,
    config_path: str = DEFAULT_CONFIG_PATH,
    overrides: Optional[Dict[str, Any]] = None,
    extra_args: Optional[list[str]] = None,
) -> int:
    """Load config, verify the installation and run one goal."""

    cfg = load_sdk_config(config_path, overrides, required=config_path != DEFAULT_CONFIG_PATH)
    ctx = GoalCtx(cfg=cfg, retriever=retriever_for(cfg), extra_args=tuple(extra_args or ()))
    return run_goal(GOALS[goal_id], ctx)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="teamcity-sdk")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to YAML config")
    p.add_argument("--log", default=None, help="Also write the log to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--teamcity-version", default=None)
    p.add_argument("--teamcity-dir", default=None, help="Installation directory (default: servers/<version>)")
    p.add_argument("--data-dir", default=None, help="Data directory, absolute or relative to the installation")
    p.add_argument("--build-dir", default=None, help="Directory holding the built plugin package")
    p.add_argument("--package", default=None, help="Plugin package file name")
    p.add_argument("--quiet", action="store_true", help="Download without asking")
    p.add_argument("--server-only", action="store_true", help="Start/stop the server without the agent")
    p.add_argument("goal", choices=goal_ids())
    p.add_argument("extra", nargs=argparse.REMAINDER, help="Extra launcher args; use: -- <args...>")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    extra = list(args.extra)
    if extra and extra[0] == "--":
        extra = extra[1:]

    try:
        return run(args.goal, config_path=args.config, overrides=_overrides(args), extra_args=extra)
    except TeamCitySdkError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130
    except Exception:
        logger.exception("teamcity-sdk failed")
        raise


if __name__ == "__main__":
    raise SystemExit(main())
