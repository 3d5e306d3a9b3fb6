from __future__ import annotations

import logging
import zipfile
import zlib
from pathlib import Path
from xml.etree import ElementTree

from ..errors import InstallationUnreadable

logger = logging.getLogger(__name__)

COMMON_API_JAR = "webapps/ROOT/WEB-INF/lib/common-api.jar"
VERSION_ENTRY = "serverVersion.properties.xml"
VERSION_KEY = "Display_Version"


def _parse_properties_xml(data: bytes) -> dict[str, str]:
    """Parse a java.util.Properties XML document into a dict."""

    root = ElementTree.fromstring(data)
    props: dict[str, str] = {}
    for entry in root.iter("entry"):
        key = entry.get("key")
        if key is not None:
            props[key] = entry.text or ""
    return props


def read_version(teamcity_dir: str | Path) -> str:
    """Read the display version from common-api.jar inside an installation."""

    d = Path(teamcity_dir)
    jar = d / COMMON_API_JAR

    if not jar.is_file():
        raise InstallationUnreadable(
            f"Can not read TeamCity version. Can not access [{jar.absolute()}]. "
            f"Check that [{d}] points to valid TeamCity installation"
        )

    try:
        with zipfile.ZipFile(jar) as zf:
            data = zf.read(VERSION_ENTRY) if VERSION_ENTRY in zf.namelist() else None
    except (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError, OSError) as e:
        # RuntimeError: encrypted entry; NotImplementedError: unsupported compression
        raise InstallationUnreadable(
            f"Failed to read [{jar.absolute()}]: {e}. Please, verify your installation."
        ) from e

    if data is None:
        raise InstallationUnreadable(
            f"Failed to read TeamCity's version from [{jar.absolute()}]: "
            f"no {VERSION_ENTRY} entry. Please, verify your installation."
        )

    try:
        props = _parse_properties_xml(data)
    except ElementTree.ParseError as e:
        raise InstallationUnreadable(
            f"Malformed {VERSION_ENTRY} in [{jar.absolute()}]: {e}"
        ) from e

    if VERSION_KEY not in props:
        raise InstallationUnreadable(
            f"{VERSION_KEY} is missing from {VERSION_ENTRY} in [{jar.absolute()}]. "
            "Please, verify your installation."
        )

    version = props[VERSION_KEY]
    logger.debug("Installed TeamCity version at %s: %s", d, version)
    return version
