from __future__ import annotations

import logging
import os
import platform
import shlex
import subprocess
import threading
from pathlib import Path
from typing import IO, Mapping, Optional, Sequence

from ..logging_utils import LogSink

logger = logging.getLogger(__name__)

AGENT_AND_SERVER_SCRIPT = "runAll"
SERVER_SCRIPT = "teamcity-server"


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def is_windows() -> bool:
    return platform.system() == "Windows"


def start_script_name(start_agent: bool) -> str:
    return AGENT_AND_SERVER_SCRIPT if start_agent else SERVER_SCRIPT


def build_run_command(start_agent: bool, *params: str) -> list[str]:
    """Launcher command line, relative to the installation directory."""

    name = start_script_name(start_agent)
    if is_windows():
        return ["cmd", "/C", f"bin\\{name}", *params]
    return ["/bin/bash", f"bin/{name}.sh", *params]


class OutputDrain(threading.Thread):
    """Forward every line of a text stream to ``log.info`` until EOF."""

    def __init__(self, stream: IO[str], log: LogSink) -> None:
        super().__init__(name="teamcity-output-drain", daemon=True)
        self._stream = stream
        self._log = log
        self.lines = 0

    def run(self) -> None:
        try:
            for line in iter(self._stream.readline, ""):
                self._log.info("%s", line.rstrip("\r\n"))
                self.lines += 1
        finally:
            self._stream.close()

    def wait_drained(self) -> None:
        """Block until the writer side closed the pipe and every line was logged.

        Call after the process exited. A background child that inherited the
        pipe keeps it open, so this also waits for that child.
        """

        self.join()


def run_process(
    argv: Sequence[str],
    *,
    cwd: str | Path,
    log: LogSink = logger,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """Run a command, streaming its stdout to ``log`` while it runs.

    Returns the exit code; all output has been logged by the time it returns.
    Non-zero exit codes are the caller's business.
    """

    argv_list = list(argv)
    logger.info("CMD %s (cwd=%s)", _fmt_argv(argv_list), cwd)

    p = subprocess.Popen(
        argv_list,
        cwd=str(cwd),
        stdout=subprocess.PIPE,
        text=True,
        errors="replace",
        env=dict(os.environ, **env) if env else None,
    )
    assert p.stdout is not None

    drain = OutputDrain(p.stdout, log)
    drain.start()
    try:
        returncode = p.wait()
    finally:
        drain.wait_drained()

    logger.debug("Process exited with %s after %d lines", returncode, drain.lines)
    return returncode


def run_launcher(
    teamcity_dir: str | Path,
    start_agent: bool,
    extra_args: Sequence[str] = (),
    *,
    log: LogSink = logger,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    return run_process(build_run_command(start_agent, *extra_args), cwd=teamcity_dir, log=log, env=env)
