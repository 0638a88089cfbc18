"""Core schema models shared across the locator, extractor, gates and uploader."""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
GateName = Literal["ALL", "CRITICAL", "HIGH", "MEDIUM", "LOW"]
ReportResult = Literal["PASSED", "FAILED"]

SEVERITIES: tuple[Severity, ...] = ("CRITICAL", "HIGH", "MEDIUM", "LOW")
GATE_NAMES: tuple[GateName, ...] = ("ALL",) + SEVERITIES

# Ordinal used for ranking: LOW < MEDIUM < HIGH < CRITICAL.
SEVERITY_ORDER: Dict[Severity, int] = {
    "LOW": 1,
    "MEDIUM": 2,
    "HIGH": 3,
    "CRITICAL": 4,
}

QualityGateConfig = Dict[GateName, int]


class SourceReport(BaseModel):
    """A located file that was recognised as a Parasoft static analysis report."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    recognized: bool = True


class Finding(BaseModel):
    """Normalized violation, shaped like a Bitbucket Code Insights annotation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    external_id: str
    annotation_type: Literal["VULNERABILITY"] = "VULNERABILITY"
    severity: Severity
    path: str
    line: Optional[int] = Field(default=None, ge=0)
    summary: str = ""
    details: str = ""


class ReportFindings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    tool_name: str
    findings: List[Finding] = Field(default_factory=list)


PerReportFindings = Dict[str, ReportFindings]


class GateOutcome(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: GateName
    observed: int = Field(ge=0)
    threshold: int = Field(ge=0)
    passed: bool


class QualityGateEvaluation(BaseModel):
    """Per-gate outcomes for one report; ``passed`` is False if any gate failed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    outcomes: List[GateOutcome] = Field(default_factory=list)
    passed: bool = True

    @property
    def failures(self) -> List[GateOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.passed]


class RunResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    exit_code: int = 0
    evaluations: Dict[str, QualityGateEvaluation] = Field(default_factory=dict)
