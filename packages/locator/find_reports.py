"""Resolve a path or glob pattern to Parasoft static analysis XML reports."""
from __future__ import annotations

import glob
import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List

from packages.errors import ReportNotFoundError
from packages.messages.catalog import format_message
from packages.schema.models import SourceReport

_LOG = logging.getLogger(__name__)

STATIC_REPORT_MARKER = "StdViols"


def find_static_analysis_reports(pattern: str, clone_dir: str) -> List[SourceReport]:
    """Return the reports matching ``pattern`` that contain static analysis results.

    Relative patterns are resolved against ``clone_dir``. Raises
    ``ReportNotFoundError`` when nothing usable remains after filtering.
    """

    if os.path.isabs(pattern):
        _LOG.info(format_message("finding_static_analysis_report"))
        resolved = os.path.abspath(pattern)
    else:
        _LOG.info(format_message("finding_static_analysis_report_in_working_directory", clone_dir))
        resolved = os.path.join(clone_dir, pattern)

    resolved = resolved.replace("\\", "/")

    reports: List[SourceReport] = []
    for match in sorted(glob.glob(resolved, recursive=True)):
        candidate = match.replace("\\", "/")
        if not os.path.isfile(candidate):
            continue
        if not candidate.lower().endswith(".xml"):
            _LOG.warning(format_message("skipping_unrecognized_report_file", candidate))
            continue
        if not is_static_report(Path(candidate)):
            _LOG.warning(format_message("skipping_unrecognized_report_file", candidate))
            continue
        _LOG.info(format_message("found_matching_file", candidate))
        reports.append(SourceReport(path=candidate))

    if not reports:
        raise ReportNotFoundError(
            format_message("static_analysis_report_not_found", pattern, resolved),
            pattern=pattern,
            resolved=resolved,
        )
    return reports


def is_static_report(path: Path) -> bool:
    """Stream ``path`` and report whether a ``StdViols`` element is present."""

    try:
        for _event, element in ET.iterparse(str(path), events=("start",)):
            if _local_name(element.tag) == STATIC_REPORT_MARKER:
                return True
    except (ET.ParseError, OSError) as exc:
        _LOG.warning(format_message("failed_to_parse_static_analysis_report", path.as_posix(), exc))
        return False
    return False


def _local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    return tag


__all__ = ["find_static_analysis_reports", "is_static_report", "STATIC_REPORT_MARKER"]
