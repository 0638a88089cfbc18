"""Rank, cap, batch and publish findings as Bitbucket Code Insights reports."""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Sequence, Tuple

from packages.config.settings import BitbucketSettings
from packages.findings.fingerprint import stable_id
from packages.insights.client import InsightsClient
from packages.messages.catalog import format_message
from packages.quality_gate.gates import evaluate_quality_gates
from packages.schema.models import (
    SEVERITY_ORDER,
    Finding,
    PerReportFindings,
    QualityGateConfig,
    QualityGateEvaluation,
    ReportFindings,
    RunResult,
)

_LOG = logging.getLogger(__name__)

# Bitbucket limits: 1000 annotations per report, 100 per POST.
MAX_ANNOTATIONS_PER_REPORT = 1000
MAX_ANNOTATIONS_PER_REQUEST = 100

REPORT_TYPE = "SECURITY"
REPORTER = "Parasoft"


def sort_by_severity(findings: Sequence[Finding]) -> List[Finding]:
    """Highest severity first; equal severities keep their input order."""

    return sorted(findings, key=lambda finding: SEVERITY_ORDER[finding.severity], reverse=True)


def cap_findings(
    findings: Sequence[Finding], limit: int = MAX_ANNOTATIONS_PER_REPORT
) -> Tuple[List[Finding], int]:
    return list(findings[:limit]), len(findings)


def chunk(findings: Sequence[Finding], size: int = MAX_ANNOTATIONS_PER_REQUEST) -> Iterator[List[Finding]]:
    for start in range(0, len(findings), size):
        yield list(findings[start : start + size])


def report_id_for(report_path: str, commit: str) -> str:
    return stable_id(report_path + commit)


def build_status_key_for(report_path: str, pr_id: str) -> str:
    return stable_id(report_path + pr_id)


def upload_findings(
    per_report: PerReportFindings,
    settings: BitbucketSettings,
    gates: QualityGateConfig,
    client: InsightsClient,
) -> RunResult:
    """Publish each report with findings, in order, and compute the exit code.

    Without quality gates any uploaded finding fails the run; with gates only
    a failing gate does. ``UploadError`` stops the run; batches that were
    already posted stay on the commit.
    """

    uploaded = 0
    gate_failed = False
    evaluations: Dict[str, QualityGateEvaluation] = {}

    for report_path, report in per_report.items():
        if not report.findings:
            _LOG.info(format_message("skip_static_analysis_report", report_path))
            continue

        evaluation = None
        if gates:
            evaluation = evaluate_quality_gates(report.findings, gates)
            evaluations[report_path] = evaluation
            gate_failed = gate_failed or not evaluation.passed

        uploaded += _upload_report(report_path, report, settings, client, evaluation)

    exit_code = 0
    if gates:
        if gate_failed:
            exit_code = 1
    elif uploaded > 0:
        _LOG.info(format_message("mark_build_to_failed_due_to_vulnerability"))
        exit_code = 1
    return RunResult(exit_code=exit_code, evaluations=evaluations)


def _upload_report(
    report_path: str,
    report: ReportFindings,
    settings: BitbucketSettings,
    client: InsightsClient,
    evaluation: QualityGateEvaluation | None,
) -> int:
    tool_name = report.tool_name
    _LOG.info(format_message("uploading_parasoft_report_results", tool_name, report_path))

    findings, total = cap_findings(sort_by_severity(report.findings))
    if total > len(findings):
        _LOG.info(format_message("only_specified_vulnerabilities_will_be_uploaded", len(findings)))
        details = format_message("report_details_description_2", report_path, total, len(findings))
    else:
        details = format_message("report_details_description_1", report_path, total)

    passed = evaluation is not None and evaluation.passed
    report_id = report_id_for(report_path, settings.commit)
    client.upsert_report(
        report_id,
        {
            "title": f"Parasoft {tool_name}",
            "details": details,
            "report_type": REPORT_TYPE,
            "reporter": REPORTER,
            "result": "PASSED" if passed else "FAILED",
        },
        tool_name,
    )

    for batch in chunk(findings):
        client.create_annotations(
            report_id,
            [finding.model_dump(exclude_none=True) for finding in batch],
            tool_name,
        )
    _LOG.info(format_message("uploaded_parasoft_report_results", tool_name, len(findings)))

    if evaluation is not None and settings.pr_id:
        description_key = "build_status_description_passed" if passed else "build_status_description_failed"
        client.create_build_status(
            {
                "key": build_status_key_for(report_path, settings.pr_id),
                "state": "SUCCESSFUL" if passed else "FAILED",
                "name": f"Parasoft {tool_name}",
                "description": format_message(description_key, report_path),
                "url": settings.pipeline_url(),
            }
        )
        _LOG.info(format_message("created_build_status_in_pull_request", settings.pr_id))

    return len(findings)


__all__ = [
    "upload_findings",
    "sort_by_severity",
    "cap_findings",
    "chunk",
    "report_id_for",
    "build_status_key_for",
    "MAX_ANNOTATIONS_PER_REPORT",
    "MAX_ANNOTATIONS_PER_REQUEST",
]
