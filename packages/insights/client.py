"""Thin Bitbucket Code Insights client over ``requests``."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from packages.config.settings import DEFAULT_REQUEST_TIMEOUT, BitbucketSettings
from packages.errors import UploadError
from packages.messages.catalog import format_message

_LOG = logging.getLogger(__name__)


class InsightsClient:
    """Issues the report, annotation and build status calls for one commit."""

    def __init__(
        self,
        settings: BitbucketSettings,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.settings = settings
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = settings.auth

    def upsert_report(self, report_id: str, payload: Dict[str, Any], tool_name: str) -> requests.Response:
        return self._send(
            "PUT",
            self.settings.report_url(report_id),
            payload,
            "failed_to_create_report_module",
            tool_name,
        )

    def create_annotations(
        self, report_id: str, batch: List[Dict[str, Any]], tool_name: str
    ) -> requests.Response:
        return self._send(
            "POST",
            self.settings.annotations_url(report_id),
            batch,
            "failed_to_upload_parasoft_report_results",
            tool_name,
        )

    def create_build_status(self, payload: Dict[str, Any]) -> requests.Response:
        return self._send(
            "POST",
            self.settings.build_status_url(),
            payload,
            "failed_to_create_build_status_in_pull_request",
            self.settings.pr_id,
        )

    def close(self) -> None:
        self._session.close()

    def _send(self, method: str, url: str, payload: Any, failure_key: str, subject: object) -> requests.Response:
        """Send one request; log the remote error body and raise ``UploadError`` on failure."""

        _LOG.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            _log_error_body(exc.response)
            raise UploadError(format_message(failure_key, subject, exc)) from exc
        return response


def _log_error_body(response: Optional[requests.Response]) -> None:
    if response is None or not response.content:
        return
    try:
        body = json.dumps(response.json(), indent=2, ensure_ascii=False)
    except ValueError:
        body = response.text
    _LOG.error(body)


__all__ = ["InsightsClient"]
