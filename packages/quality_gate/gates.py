"""Parse ``NAME=THRESHOLD`` quality gates and evaluate them against findings."""
from __future__ import annotations

import json
import logging
from collections import Counter
from typing import Dict, Iterable, List, Sequence

from packages.messages.catalog import format_message
from packages.schema.models import (
    GATE_NAMES,
    Finding,
    GateName,
    GateOutcome,
    QualityGateConfig,
    QualityGateEvaluation,
)

_LOG = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0


def parse_quality_gates(values: Sequence[str]) -> QualityGateConfig:
    """Build the gate configuration from repeated ``--qualityGate`` values.

    Unknown names and repeated names are dropped; thresholds that are empty,
    not an integer or negative fall back to ``0``. Each case logs a warning.
    """

    gates: Dict[GateName, int] = {}
    for raw in values:
        name_part, _, threshold_part = raw.partition("=")
        name = name_part.strip().upper()
        if name not in GATE_NAMES:
            _LOG.warning(
                format_message(
                    "skipped_quality_gate_with_invalid_bitbucket_security_level",
                    raw,
                    name_part.strip(),
                )
            )
            continue
        if name in gates:
            _LOG.warning(format_message("skipped_quality_gate_with_same_bitbucket_security_level", raw))
            continue
        gates[name] = _parse_threshold(threshold_part.strip())  # type: ignore[index]

    if gates:
        _LOG.debug(format_message("configured_quality_gates", json.dumps(gates, separators=(",", ":"))))
    else:
        _LOG.debug(format_message("no_quality_gate_is_configured"))
    return gates


def _parse_threshold(value: str) -> int:
    try:
        threshold = int(value)
    except ValueError:
        _LOG.warning(
            format_message("invalid_threshold_value_but_use_default_value", value, DEFAULT_THRESHOLD)
        )
        return DEFAULT_THRESHOLD
    if threshold < 0:
        _LOG.warning(
            format_message("threshold_value_less_than_zero_but_use_default_value", value, DEFAULT_THRESHOLD)
        )
        return DEFAULT_THRESHOLD
    return threshold


def count_findings(findings: Iterable[Finding]) -> Dict[GateName, int]:
    """Observed count per gate: ``ALL`` is the total, severities count exact matches."""

    by_severity = Counter(finding.severity for finding in findings)
    counts: Dict[GateName, int] = {"ALL": sum(by_severity.values())}
    for name in GATE_NAMES[1:]:
        counts[name] = by_severity.get(name, 0)  # type: ignore[call-overload]
    return counts


def evaluate_quality_gates(findings: Iterable[Finding], gates: QualityGateConfig) -> QualityGateEvaluation:
    """A gate fails when the observed count reaches its threshold."""

    counts = count_findings(findings)
    outcomes: List[GateOutcome] = []
    _LOG.info(format_message("evaluating_quality_gates"))
    _LOG.info(format_message("details_for_each_quality_gate"))
    for name, threshold in gates.items():
        observed = counts[name]
        passed = observed < threshold
        key = "quality_gate_passed_details" if passed else "quality_gate_failed_details"
        _LOG.info(format_message(key, name, observed, threshold))
        outcomes.append(GateOutcome(name=name, observed=observed, threshold=threshold, passed=passed))

    evaluation = QualityGateEvaluation(
        outcomes=outcomes,
        passed=all(outcome.passed for outcome in outcomes),
    )
    failures = len(evaluation.failures)
    if failures == 1:
        _LOG.info(format_message("mark_build_to_failed_due_to_quality_gate_failure"))
    elif failures > 1:
        _LOG.info(format_message("mark_build_to_failed_due_to_quality_gate_failures"))
    return evaluation


__all__ = ["parse_quality_gates", "evaluate_quality_gates", "count_findings", "DEFAULT_THRESHOLD"]
