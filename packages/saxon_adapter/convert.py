"""Adapter that runs the bundled Saxon XSLT transform to turn Parasoft XML into SARIF."""
from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path
from typing import List, Sequence

from packages.errors import ConversionFailedError, ConversionTimeoutError, ConverterResourceNotFoundError
from packages.messages.catalog import format_message

_LOG = logging.getLogger(__name__)

_RESOURCES_DIR = Path(__file__).resolve().with_name("resources")
SAXON_JAR = _RESOURCES_DIR / "SaxonHE12-2J" / "saxon-he-12.2.jar"
SARIF_XSL = _RESOURCES_DIR / "sarif.xsl"

# Exit code reported when the child was terminated by a signal.
SIGNAL_EXIT_CODE = 150


def sarif_output_path(source_path: str) -> str:
    """``report.XML`` -> ``report.sarif``; paths without an xml suffix get one appended."""

    index = source_path.lower().rfind(".xml")
    if index == -1:
        return source_path + ".sarif"
    return source_path[:index] + ".sarif"


def build_command(java_path: str, source_path: str, out_path: str, workspace: str) -> List[str]:
    project_root = str(Path(workspace)).replace("\\", "/")
    return [
        java_path,
        "-jar",
        str(SAXON_JAR),
        f"-s:{source_path}",
        f"-xsl:{SARIF_XSL}",
        f"-o:{out_path}",
        "-versionmsg:off",
        f"projectRootPaths={project_root}",
    ]


def ensure_resources() -> None:
    """Raise ``ConverterResourceNotFoundError`` unless the jar and stylesheet are installed."""

    for resource in (SAXON_JAR, SARIF_XSL):
        if not Path(resource).is_file():
            raise ConverterResourceNotFoundError(
                format_message("converter_resource_not_found", Path(resource).as_posix()),
                path=Path(resource).as_posix(),
            )


def convert_report(java_path: str, source_path: str, workspace: str, timeout: float) -> Path:
    """Convert ``source_path`` to SARIF next to it and return the SARIF path."""

    _LOG.debug(format_message("converting_static_analysis_report_to_sarif", source_path))
    out_path = sarif_output_path(source_path)
    cmd = build_command(java_path, source_path, out_path, workspace)
    _LOG.debug(" ".join(f'"{part}"' if " " in part else part for part in cmd))

    try:
        exit_code = run_process(cmd, timeout)
    except subprocess.TimeoutExpired as exc:
        raise ConversionTimeoutError(
            format_message("conversion_timed_out", source_path, timeout),
            source=source_path,
        ) from exc

    if exit_code != 0:
        raise ConversionFailedError(
            format_message("failed_parse_report", source_path, exit_code),
            source=source_path,
            exit_code=exit_code,
        )

    _LOG.debug(format_message("converted_sarif_report", out_path))
    return Path(out_path)


def run_process(cmd: Sequence[str], timeout: float) -> int:
    """Run ``cmd`` streaming its merged output to the log line by line.

    Raises ``subprocess.TimeoutExpired`` after killing the child when it runs
    longer than ``timeout`` seconds. ``OSError`` from spawning propagates.
    """

    process = subprocess.Popen(
        list(cmd),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    timed_out = threading.Event()

    def _kill() -> None:
        if process.poll() is None:
            timed_out.set()
            process.kill()

    watchdog = threading.Timer(timeout, _kill)
    watchdog.daemon = True
    watchdog.start()
    try:
        if process.stdout is not None:
            with process.stdout:
                for line in process.stdout:
                    text = line.rstrip()
                    if text:
                        _LOG.info(text)
        returncode = process.wait()
    finally:
        watchdog.cancel()

    # A child that exited cleanly while the watchdog fired is not a timeout.
    if timed_out.is_set() and returncode != 0:
        raise subprocess.TimeoutExpired(list(cmd), timeout)
    if returncode < 0:
        return SIGNAL_EXIT_CODE
    return returncode


__all__ = [
    "convert_report",
    "ensure_resources",
    "run_process",
    "build_command",
    "sarif_output_path",
    "SAXON_JAR",
    "SARIF_XSL",
    "SIGNAL_EXIT_CODE",
]
