from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, List, Optional, Tuple

import pytest

from teamcity_sdk.lib.installation import MARKER_FILE
from teamcity_sdk.lib.version import COMMON_API_JAR, VERSION_ENTRY


def properties_xml(entries: dict[str, str]) -> str:
    body = "".join(f'  <entry key="{k}">{v}</entry>\n' for k, v in entries.items())
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
        '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">\n'
        f"<properties>\n{body}</properties>\n"
    )


def make_installation(
    root: Path,
    version: Optional[str] = "2021.1",
    *,
    marker: bool = True,
    jar_entry: Optional[str] = None,
) -> Path:
    """Lay out a fake TeamCity tree under ``root``."""

    root.mkdir(parents=True, exist_ok=True)
    if marker:
        (root / MARKER_FILE).parent.mkdir(parents=True, exist_ok=True)
        (root / MARKER_FILE).write_text("#!/bin/bash\n", encoding="utf-8")

    if version is not None or jar_entry is not None:
        jar = root / COMMON_API_JAR
        jar.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(jar, "w") as zf:
            if jar_entry is not None:
                zf.writestr(VERSION_ENTRY, jar_entry)
            else:
                zf.writestr(VERSION_ENTRY, properties_xml({"Display_Version": str(version)}))
    return root


class RecordingLog:
    """LogSink that keeps (level, message) pairs."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str]] = []

    def _add(self, level: str, msg: str, *args: Any) -> None:
        self.records.append((level, msg % args if args else msg))

    def info(self, msg: str, *args: Any) -> None:
        self._add("info", msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self._add("debug", msg, *args)

    def warning(self, msg: str, *args: Any) -> None:
        self._add("warning", msg, *args)

    def at(self, level: str) -> List[str]:
        return [m for lvl, m in self.records if lvl == level]


class FakeRetriever:
    def __init__(self, install_version: Optional[str] = None) -> None:
        self.calls: list = []
        self.install_version = install_version

    def download(self, source_url, version, dest, log_callback) -> None:
        self.calls.append((source_url, version, Path(dest)))
        log_callback("fetching", False)
        log_callback("bytes: 42", True)
        if self.install_version is not None:
            make_installation(Path(dest), self.install_version)


@pytest.fixture
def log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def retriever() -> FakeRetriever:
    return FakeRetriever()


def no_input(prompt: str) -> str:
    raise AssertionError(f"unexpected prompt: {prompt}")
