from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

DEFAULT_CONFIG_PATH = "teamcity-sdk.yaml"
DEFAULT_SOURCE_URL = "http://download.jetbrains.com/teamcity"
DEFAULT_DATA_DIRECTORY = ".datadir"
DEFAULT_BUILD_DIRECTORY = "target"

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s == "":
        return default
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


@dataclass(frozen=True)
class SdkConfig:
    """Read-only view over the raw configuration mapping.

    Constructed once per invocation and handed to every operation.
    """

    raw: Mapping[str, Any]

    @property
    def teamcity_version(self) -> str:
        v = self.raw.get("teamcity_version")
        if v is None or str(v) == "":
            raise ValueError("teamcity_version is required")
        return str(v)

    @property
    def teamcity_dir(self) -> Path:
        d = self.raw.get("teamcity_dir")
        return Path(str(d)) if d else Path("servers") / self.teamcity_version

    @property
    def download_quietly(self) -> bool:
        return _as_bool(self.raw.get("download_quietly"), False)

    @property
    def teamcity_source_url(self) -> str:
        return str(self.raw.get("teamcity_source_url") or DEFAULT_SOURCE_URL)

    @property
    def artifact_id(self) -> str:
        return str(self.raw.get("artifact_id") or Path.cwd().name)

    @property
    def plugin_package_name(self) -> str:
        return str(self.raw.get("plugin_package_name") or f"{self.artifact_id}.zip")

    @property
    def start_agent(self) -> bool:
        return _as_bool(self.raw.get("start_agent"), True)

    @property
    def data_directory(self) -> str:
        return str(self.raw.get("data_directory") or DEFAULT_DATA_DIRECTORY)

    @property
    def build_directory(self) -> Path:
        return Path(str(self.raw.get("build_directory") or DEFAULT_BUILD_DIRECTORY))

    @property
    def retriever(self) -> Optional[str]:
        r = self.raw.get("retriever")
        return str(r) if r else None

    @property
    def server_opts(self) -> Optional[str]:
        o = self.raw.get("server_opts")
        return str(o) if o else None


def load_sdk_config(
    path: str = DEFAULT_CONFIG_PATH,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    required: bool = False,
) -> SdkConfig:
    """Load YAML config and apply non-None overrides on top."""

    p = Path(path)
    raw: Dict[str, Any] = {}

    if p.exists():
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("PyYAML is required to read teamcity-sdk config") from e

        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping/object")
        raw.update(data)
    elif required:
        raise FileNotFoundError(path)

    for k, v in (overrides or {}).items():
        if v is not None:
            raw[k] = v

    return SdkConfig(raw=dict(raw))
