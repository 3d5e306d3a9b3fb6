from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from .config import SdkConfig
from .lib.command import run_launcher
from .lib.deploy import deploy_plugin
from .lib.download import Retriever, ensure_downloaded
from .lib.installation import InstallationState, probe
from .logging_utils import LogSink

logger = logging.getLogger(__name__)


def ensure_installation_ready(
    cfg: SdkConfig,
    *,
    retriever: Retriever,
    log: LogSink = logger,
    input_fn: Optional[Callable[[str], str]] = None,
) -> InstallationState:
    """Verify the installation, downloading it when missing.

    A version mismatch is only warned about. Returns the state found before
    any download.
    """

    d = cfg.teamcity_dir
    expected = cfg.teamcity_version
    state, installed = probe(d, expected)

    if state is InstallationState.GOOD:
        log.info("TeamCity %s is located at %s", expected, d)
    elif state is InstallationState.MISVERSION:
        log.warning(
            "TeamCity version at [%s] is [%s], but project uses [%s]",
            d.absolute(),
            installed,
            expected,
        )
    else:
        log.info("TeamCity distribution not found at [%s]", d.absolute())
        ensure_downloaded(d, cfg, retriever=retriever, log=log, input_fn=input_fn)
    return state


@dataclass(frozen=True)
class GoalCtx:
    cfg: SdkConfig
    retriever: Retriever
    log: LogSink = logger
    extra_args: Sequence[str] = ()
    input_fn: Optional[Callable[[str], str]] = None


class Goal(Protocol):
    """A unit of work run against a verified installation."""

    goal_id: str

    def run(self, ctx: GoalCtx) -> int:
        ...


def _launch(ctx: GoalCtx, command: str, env: Dict[str, str] | None = None) -> int:
    cfg = ctx.cfg
    rc = run_launcher(
        cfg.teamcity_dir,
        cfg.start_agent,
        [command, *ctx.extra_args],
        log=ctx.log,
        env=env,
    )
    if rc != 0:
        ctx.log.warning("TeamCity %s exited with code %s", command, rc)
    return rc


class CheckGoal:
    goal_id = "check"

    def run(self, ctx: GoalCtx) -> int:
        return 0


class DeployGoal:
    goal_id = "deploy"

    def run(self, ctx: GoalCtx) -> int:
        data_dir = deploy_plugin(ctx.cfg, log=ctx.log)
        ctx.log.info("TeamCity data directory: %s", data_dir)
        return 0


class StartGoal:
    goal_id = "start"

    def run(self, ctx: GoalCtx) -> int:
        data_dir = deploy_plugin(ctx.cfg, log=ctx.log)
        env = {"TEAMCITY_DATA_PATH": str(data_dir)}
        if ctx.cfg.server_opts:
            env["TEAMCITY_SERVER_OPTS"] = ctx.cfg.server_opts
        ctx.log.info("Starting TeamCity with data directory %s", data_dir)
        return _launch(ctx, "start", env)


class StopGoal:
    goal_id = "stop"

    def run(self, ctx: GoalCtx) -> int:
        return _launch(ctx, "stop")


class ReloadGoal:
    goal_id = "reload"

    def run(self, ctx: GoalCtx) -> int:
        data_dir = deploy_plugin(ctx.cfg, log=ctx.log)
        ctx.log.info("Plugin copied to %s; restart TeamCity to load it", data_dir / "plugins")
        return 0


GOALS: Dict[str, Goal] = {g.goal_id: g for g in (CheckGoal(), DeployGoal(), StartGoal(), StopGoal(), ReloadGoal())}


def run_goal(goal: Goal, ctx: GoalCtx) -> int:
    ensure_installation_ready(ctx.cfg, retriever=ctx.retriever, log=ctx.log, input_fn=ctx.input_fn)
    ctx.log.info("Running goal %s", goal.goal_id)
    return goal.run(ctx)


def goal_ids() -> List[str]:
    return list(GOALS)
