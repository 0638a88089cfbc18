import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from packages.config.settings import BitbucketSettings
from packages.schema.models import Finding

BITBUCKET_ENV = {
    "USER_EMAIL": "user@mail.com",
    "API_TOKEN": "api-token",
    "BITBUCKET_REPO_SLUG": "repo",
    "BITBUCKET_COMMIT": "commit",
    "BITBUCKET_WORKSPACE": "workspace",
    "BITBUCKET_CLONE_DIR": "/clone",
    "BITBUCKET_API_URL": "https://api.bitbucket.org/2.0/repositories",
    "BITBUCKET_PR_ID": "1",
    "BITBUCKET_BUILD_NUMBER": "7",
}

STATIC_REPORT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<ResultsSession toolName="dotTEST">
  <CodingStandards>
    <StdViols>
      <StdViol rule="CDD.DUPC" msg="Duplicate code" sev="2" />
    </StdViols>
  </CodingStandards>
</ResultsSession>
"""

COVERAGE_REPORT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Coverage ver="1.0"><CoverageData /></Coverage>
"""


def make_response(status: int = 200, body: Any = None, url: str = "https://api.bitbucket.org") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.reason = "OK" if status < 400 else "Internal Server Error"
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


class FakeSession:
    """Records requests and answers them through ``responder``."""

    def __init__(self, responder: Optional[Callable[[str, str], requests.Response]] = None):
        self.calls: List[Dict[str, Any]] = []
        self.auth = None
        self.closed = False
        self._responder = responder or (lambda method, url: make_response(200, {}))

    def request(self, method: str, url: str, json: Any = None, timeout: Any = None) -> requests.Response:
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        return self._responder(method, url)

    def close(self) -> None:
        self.closed = True

    def calls_for(self, method: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["method"] == method]


def sarif_result(
    rule_id: str = "BD.PB.CC",
    text: str = "Condition always evaluates to true",
    uri: str = "src/app.cs",
    level: str = "warning",
    start_line: Optional[int] = 10,
    end_line: Optional[int] = None,
    fingerprints: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    region: Dict[str, int] = {}
    if start_line is not None:
        region["startLine"] = start_line
    if end_line is not None:
        region["endLine"] = end_line
    result: Dict[str, Any] = {
        "ruleId": rule_id,
        "level": level,
        "message": {"text": text},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": uri},
                    "region": region,
                }
            }
        ],
        "partialFingerprints": fingerprints if fingerprints is not None else {},
    }
    result.update(extra)
    return result


def sarif_rule(rule_id: str = "BD.PB.CC", sev_level: Optional[str] = "2", **descriptions: str) -> Dict[str, Any]:
    rule: Dict[str, Any] = {"id": rule_id, "properties": {}}
    if sev_level is not None:
        rule["properties"]["parasoftSevLevel"] = sev_level
    if "full" in descriptions:
        rule["fullDescription"] = {"text": descriptions["full"]}
    if "short" in descriptions:
        rule["shortDescription"] = {"text": descriptions["short"]}
    return rule


def sarif_document(results: List[Dict[str, Any]], rules: Optional[List[Dict[str, Any]]] = None, tool: str = "dotTEST") -> Dict[str, Any]:
    return {
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": tool, "rules": rules if rules is not None else [sarif_rule()]}},
                "results": results,
            }
        ],
    }


def write_sarif(path: Path, document: Dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def make_finding(index: int, severity: str = "MEDIUM") -> Finding:
    return Finding(
        external_id=f"id-{index}",
        severity=severity,
        path="src/app.cs",
        line=index + 1,
        summary="summary",
        details=f"details {index}",
    )


@pytest.fixture
def bitbucket_env() -> Dict[str, str]:
    return dict(BITBUCKET_ENV)


@pytest.fixture
def settings(tmp_path) -> BitbucketSettings:
    env = dict(BITBUCKET_ENV, BITBUCKET_CLONE_DIR=str(tmp_path))
    return BitbucketSettings.from_env(env)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def converter_resources(tmp_path, monkeypatch):
    """Point the converter at a stand-in jar and stylesheet."""

    from packages.saxon_adapter import convert

    resources = tmp_path / "resources"
    resources.mkdir()
    jar = resources / "saxon-he-12.2.jar"
    xsl = resources / "sarif.xsl"
    jar.write_bytes(b"PK")
    xsl.write_text("<xsl:stylesheet/>")
    monkeypatch.setattr(convert, "SAXON_JAR", jar)
    monkeypatch.setattr(convert, "SARIF_XSL", xsl)
    return jar, xsl
