import pytest
from pydantic import ValidationError

from packages.schema.models import SEVERITY_ORDER, Finding, QualityGateEvaluation, GateOutcome
from packages.schema.sarif import SarifLog


def sample_finding(**overrides) -> Finding:
    data = {
        "external_id": "6a1c0d0e-0000-5000-8000-000000000001",
        "severity": "HIGH",
        "path": "src/app.cs",
        "line": 42,
        "summary": "Avoid hardcoded passwords [SEC.HCP]",
        "details": "Hardcoded password detected",
    }
    data.update(overrides)
    return Finding(**data)


def test_finding_dump_is_annotation_payload() -> None:
    payload = sample_finding().model_dump(exclude_none=True)
    assert payload == {
        "external_id": "6a1c0d0e-0000-5000-8000-000000000001",
        "annotation_type": "VULNERABILITY",
        "severity": "HIGH",
        "path": "src/app.cs",
        "line": 42,
        "summary": "Avoid hardcoded passwords [SEC.HCP]",
        "details": "Hardcoded password detected",
    }


def test_finding_without_line_omits_it() -> None:
    payload = sample_finding(line=None).model_dump(exclude_none=True)
    assert "line" not in payload


def test_finding_rejects_unknown_severity_and_extra_fields() -> None:
    with pytest.raises(ValidationError):
        sample_finding(severity="BLOCKER")

    payload = sample_finding().model_dump()
    payload["unexpected"] = True
    with pytest.raises(ValidationError):
        Finding.model_validate(payload)


def test_severity_order_ranks_critical_highest() -> None:
    ranked = sorted(SEVERITY_ORDER, key=SEVERITY_ORDER.__getitem__)
    assert ranked == ["LOW", "MEDIUM", "HIGH", "CRITICAL"]


def test_evaluation_failures_lists_failed_gates() -> None:
    evaluation = QualityGateEvaluation(
        outcomes=[
            GateOutcome(name="ALL", observed=10, threshold=5, passed=False),
            GateOutcome(name="HIGH", observed=1, threshold=5, passed=True),
        ],
        passed=False,
    )
    assert [outcome.name for outcome in evaluation.failures] == ["ALL"]


def test_sarif_log_ignores_unknown_fields() -> None:
    log = SarifLog.model_validate(
        {
            "version": "2.1.0",
            "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
            "runs": [
                {
                    "tool": {"driver": {"name": "Jtest", "semanticVersion": "2023.1", "rules": []}},
                    "results": [
                        {
                            "ruleId": "PB.CUB.UEIC",
                            "message": {"text": "m", "markdown": "m"},
                            "locations": [
                                {
                                    "physicalLocation": {
                                        "artifactLocation": {"uri": "a/B.java", "uriBaseId": "ROOT"},
                                        "region": {"startLine": 3, "startColumn": 1},
                                    }
                                }
                            ],
                        }
                    ],
                }
            ],
        }
    )
    result = log.runs[0].results[0]
    assert log.runs[0].tool.driver.name == "Jtest"
    assert result.rule_id == "PB.CUB.UEIC"
    assert result.uri == "a/B.java"
    assert result.first_physical_location.region.start_line == 3
