"""Turn converted SARIF documents into Bitbucket-ready findings."""
from __future__ import annotations

import json
import logging
from functools import reduce
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from packages.errors import ParseError, ReportProcessingError
from packages.findings.fingerprint import FingerprintRegistry, explicit_id
from packages.messages.catalog import format_message
from packages.schema.models import Finding, PerReportFindings, ReportFindings, Severity, SourceReport
from packages.schema.sarif import Result, Rule, SarifLog

_LOG = logging.getLogger(__name__)

# Parasoft severity 1 (highest) .. 5 (lowest); 3 and 4 share MEDIUM.
PARASOFT_SEV_LEVEL_MAP: Dict[str, Severity] = {
    "1": "CRITICAL",
    "2": "HIGH",
    "3": "MEDIUM",
    "4": "MEDIUM",
    "5": "LOW",
}
SARIF_LEVEL_MAP: Dict[str, Severity] = {
    "error": "HIGH",
    "warning": "MEDIUM",
    "note": "LOW",
    "none": "LOW",
}
DEFAULT_SEVERITY: Severity = "MEDIUM"

# Bitbucket rejects annotation details longer than this.
DETAILS_MAX_LENGTH = 2000


def parse_sarif_report(sarif_path: Path) -> ReportFindings:
    """Read ``sarif_path`` and map its first run to findings.

    Suppressed results are dropped and results sharing an explicit
    ``unbViolId`` collapse to the first occurrence.
    """

    log = _read_sarif(sarif_path)
    run = log.runs[0]
    rules = {rule.id: rule for rule in run.tool.driver.rules}
    registry = FingerprintRegistry()

    findings: List[Finding] = []
    for result in run.results:
        if result.suppressions:
            continue
        explicit = explicit_id(result)
        if explicit is not None and explicit in registry:
            _LOG.debug(format_message("merged_duplicate_vulnerability", explicit, sarif_path.as_posix()))
            continue

        rule = rules.get(result.rule_id or "")
        summary = get_summary(rule)
        findings.append(
            Finding(
                external_id=registry.assign(result),
                severity=get_severity(rule, result),
                path=result.uri,
                line=get_line(result),
                summary=summary,
                details=get_details(result, summary),
            )
        )

    return ReportFindings(tool_name=run.tool.driver.name, findings=findings)


def collect_findings(
    reports: Iterable[SourceReport],
    convert: Callable[[SourceReport], Path],
    parse: Callable[[Path], ReportFindings] = parse_sarif_report,
) -> PerReportFindings:
    """Convert and parse every report, skipping the ones that fail."""

    def _step(acc: PerReportFindings, report: SourceReport) -> PerReportFindings:
        _LOG.info(format_message("parsing_parasoft_report", report.path))
        try:
            parsed = parse(convert(report))
        except (ReportProcessingError, OSError) as exc:
            _LOG.error(str(exc), exc_info=_LOG.isEnabledFor(logging.DEBUG))
            _LOG.warning(format_message("skip_static_analysis_report", report.path))
            return acc
        _LOG.info(
            format_message("parsed_parasoft_static_analysis_report", len(parsed.findings), report.path)
        )
        return {**acc, report.path: parsed}

    return reduce(_step, reports, {})


def get_severity(rule: Optional[Rule], result: Result) -> Severity:
    if rule is not None:
        level = rule.properties.get("parasoftSevLevel")
        if level is not None and str(level) in PARASOFT_SEV_LEVEL_MAP:
            return PARASOFT_SEV_LEVEL_MAP[str(level)]
    if result.level and result.level.lower() in SARIF_LEVEL_MAP:
        return SARIF_LEVEL_MAP[result.level.lower()]
    return DEFAULT_SEVERITY


def get_line(result: Result) -> Optional[int]:
    physical = result.first_physical_location
    if physical is None or physical.region is None:
        return None
    region = physical.region
    if region.end_line is not None:
        return region.end_line
    return region.start_line


def get_summary(rule: Optional[Rule]) -> str:
    if rule is None:
        return ""
    for description in (rule.full_description, rule.short_description):
        if description is not None and description.text:
            return description.text
    return ""


def get_details(result: Result, summary: str) -> str:
    text = result.message.text or ""
    suffix = ""
    kind = _violation_kind(result)
    if kind is not None:
        suffix = f" ({format_message('flow_or_duplicate_violation_details_description', kind)})"

    details = text + suffix
    if len(details) <= DETAILS_MAX_LENGTH:
        return details

    truncated = text[: DETAILS_MAX_LENGTH - len(suffix)] + suffix
    _LOG.debug(
        format_message(
            "vulnerability_details_description_limitation",
            summary,
            len(details),
            DETAILS_MAX_LENGTH,
            truncated,
        )
    )
    return truncated


def _violation_kind(result: Result) -> Optional[str]:
    if result.code_flows:
        return "flow analysis"
    if result.related_locations:
        return "code duplicate"
    return None


def _read_sarif(sarif_path: Path) -> SarifLog:
    try:
        payload = json.loads(sarif_path.read_text(encoding="utf-8-sig"))
        log = SarifLog.model_validate(payload)
    except (OSError, ValueError, ValidationError) as exc:
        raise ParseError(
            format_message("failed_to_read_sarif_report", sarif_path.as_posix(), exc),
            path=sarif_path.as_posix(),
        ) from exc
    if not log.runs:
        raise ParseError(
            format_message("sarif_report_has_no_runs", sarif_path.as_posix()),
            path=sarif_path.as_posix(),
        )
    return log


__all__ = [
    "parse_sarif_report",
    "collect_findings",
    "get_severity",
    "get_line",
    "get_summary",
    "get_details",
    "PARASOFT_SEV_LEVEL_MAP",
    "DETAILS_MAX_LENGTH",
]
