"""End-to-end run: locate, convert, extract, evaluate and upload."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from packages.config.settings import BitbucketSettings, RunOptions
from packages.findings.extract import collect_findings, parse_sarif_report
from packages.insights.client import InsightsClient
from packages.insights.upload import upload_findings
from packages.locator.find_reports import find_static_analysis_reports
from packages.saxon_adapter.convert import convert_report, ensure_resources
from packages.saxon_adapter.java import find_java
from packages.schema.models import RunResult, SourceReport


class StaticAnalysisRunner:
    """Processes every matching report sequentially and uploads the results."""

    def __init__(
        self,
        options: RunOptions,
        settings: BitbucketSettings,
        client: Optional[InsightsClient] = None,
    ):
        self.options = options
        self.settings = settings
        self._client = client

    def run(self) -> RunResult:
        reports = find_static_analysis_reports(self.options.report, self.settings.clone_dir)
        java_path = find_java(self.options.tool_or_java_root_path, self.settings.java_home)
        ensure_resources()

        def _convert(report: SourceReport) -> Path:
            return convert_report(
                java_path,
                report.path,
                self.settings.clone_dir,
                self.options.conversion_timeout,
            )

        per_report = collect_findings(reports, _convert, parse_sarif_report)

        client = self._client or InsightsClient(self.settings, timeout=self.options.request_timeout)
        try:
            return upload_findings(per_report, self.settings, self.options.quality_gates, client)
        finally:
            if self._client is None:
                client.close()


__all__ = ["StaticAnalysisRunner"]
