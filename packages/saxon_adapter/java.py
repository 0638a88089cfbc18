"""Locate a Java executable inside a JDK/JRE or a Parasoft tool installation."""
from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Sequence

from packages.errors import JavaExecutableNotFoundError, JavaRootNotFoundError
from packages.messages.catalog import format_message

_LOG = logging.getLogger(__name__)

JAVA_SUBDIRS: Sequence[str] = (
    "bin",  # plain JDK/JRE
    "bin/dottest/Jre_x64/bin",  # dotTEST
    "bin/jre/bin",  # C/C++test, Jtest
)


def java_executable_name(platform: str = sys.platform) -> str:
    return "java.exe" if platform.startswith("win") else "java"


def find_java(root_override: Optional[str], java_home: Optional[str]) -> str:
    """Return the first Java executable under ``root_override`` or ``java_home``."""

    install_dir = root_override or java_home
    if not install_dir or not os.path.exists(install_dir):
        raise JavaRootNotFoundError(format_message("java_or_parasoft_tool_install_dir_not_found"))

    _LOG.debug(format_message("finding_java_in_java_or_parasoft_tool_install_dir", install_dir))
    exe_name = java_executable_name()
    for subdir in JAVA_SUBDIRS:
        candidate = os.path.join(install_dir, subdir, exe_name)
        if os.path.exists(candidate):
            _LOG.debug(format_message("found_java_at", candidate))
            return candidate

    raise JavaExecutableNotFoundError(
        format_message("java_not_found_in_java_or_parasoft_tool_install_dir", install_dir)
    )


__all__ = ["find_java", "java_executable_name", "JAVA_SUBDIRS"]
