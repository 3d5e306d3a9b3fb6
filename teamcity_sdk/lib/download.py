from __future__ import annotations

import inspect
import logging
from importlib import import_module
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from ..config import SdkConfig
from ..errors import InstallationMissing, RetrieverLoadError, TeamCitySdkError
from ..logging_utils import LogSink, log_callback

logger = logging.getLogger(__name__)


class Retriever(Protocol):
    """Fetches a TeamCity distribution and unpacks it into ``dest``."""

    def download(
        self,
        source_url: str,
        version: str,
        dest: Path,
        log_callback: Callable[[str, bool], None],
    ) -> None:
        ...


class UnconfiguredRetriever:
    """Placeholder used when no retriever is configured; always fails."""

    def download(
        self,
        source_url: str,
        version: str,
        dest: Path,
        log_callback: Callable[[str, bool], None],
    ) -> None:
        raise TeamCitySdkError(
            f"Cannot download TeamCity {version} from {source_url}: no retriever configured. "
            "Set 'retriever: package.module:attribute' in the config, "
            f"or unpack the distribution into {dest} manually."
        )


def load_retriever(ref: str) -> Retriever:
    """Resolve ``"package.module:attribute"`` to a retriever instance."""

    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise RetrieverLoadError(f"Retriever reference must look like 'module:attribute', got {ref!r}")

    try:
        module = import_module(module_name)
    except ImportError as e:
        raise RetrieverLoadError(f"Retriever module '{module_name}' could not be imported") from e

    obj: Any = getattr(module, attr, None)
    if obj is None:
        raise RetrieverLoadError(f"Module '{module_name}' has no attribute '{attr}'")

    if inspect.isclass(obj) or (callable(obj) and not callable(getattr(obj, "download", None))):
        obj = obj()

    if not callable(getattr(obj, "download", None)):
        raise RetrieverLoadError(f"Retriever '{ref}' must expose a callable 'download'")
    return obj


def ask_to_download(
    version: str,
    dest: Path,
    *,
    input_fn: Optional[Callable[[str], str]] = None,
) -> bool:
    """Ask on the console; empty answer or anything starting with y/Y accepts."""

    try:
        answer = (input_fn or input)(f"Download TeamCity {version} to {Path(dest).absolute()}?: Y:")
    except EOFError:
        return False
    return len(answer) == 0 or answer[0].lower() == "y"


def ensure_downloaded(
    teamcity_dir: Path,
    cfg: SdkConfig,
    *,
    retriever: Retriever,
    log: LogSink = logger,
    input_fn: Optional[Callable[[str], str]] = None,
) -> None:
    """Fetch the distribution into ``teamcity_dir`` after confirmation.

    Quiet mode skips the prompt. A declined prompt raises InstallationMissing.
    Retriever errors propagate unchanged.
    """

    version = cfg.teamcity_version
    if not (cfg.download_quietly or ask_to_download(version, teamcity_dir, input_fn=input_fn)):
        raise InstallationMissing("TeamCity distribution not found.")

    log.info("Downloading TeamCity %s from %s", version, cfg.teamcity_source_url)
    retriever.download(cfg.teamcity_source_url, version, Path(teamcity_dir), log_callback(log))


def retriever_for(cfg: SdkConfig) -> Retriever:
    ref: Optional[str] = cfg.retriever
    if ref is None:
        return UnconfiguredRetriever()
    return load_retriever(ref)
