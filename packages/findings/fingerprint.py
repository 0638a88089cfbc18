"""Stable identifiers for findings and report modules."""
from __future__ import annotations

import uuid
from typing import Dict, Optional, Set

from packages.schema.sarif import Result

UUID_NAMESPACE = uuid.UUID("6af5b03d-5276-49ef-bfed-d445f2752b02")


def stable_id(text: str) -> str:
    """Deterministic UUIDv5 of ``text`` in the project namespace."""

    return str(uuid.uuid5(UUID_NAMESPACE, text))


def explicit_id(result: Result) -> Optional[str]:
    value = result.partial_fingerprints.get("unbViolId")
    if value:
        return str(value)
    return None


def fallback_key(result: Result) -> str:
    fingerprints = result.partial_fingerprints
    return "".join(
        (
            str(fingerprints.get("violType") or ""),
            result.rule_id or "",
            result.message.text or "",
            result.level or "",
            str(fingerprints.get("lineHash") or ""),
            result.uri,
        )
    )


class FingerprintRegistry:
    """Hands out fingerprints for one SARIF document.

    Results without an explicit ``unbViolId`` are hashed from their content.
    When that hash was already issued, the smallest order ``0, 1, 2, ...``
    whose hash is still unused is appended to the key.
    """

    def __init__(self) -> None:
        self._issued: Set[str] = set()
        self._next_order: Dict[str, int] = {}

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._issued

    def assign(self, result: Result) -> str:
        explicit = explicit_id(result)
        if explicit is not None:
            self._issued.add(explicit)
            return explicit

        key = fallback_key(result)
        fingerprint = stable_id(key)
        if fingerprint in self._issued:
            # Orders below the stored one were already issued for this key.
            order = self._next_order.get(key, 0)
            fingerprint = stable_id(f"{key}{order}")
            while fingerprint in self._issued:
                order += 1
                fingerprint = stable_id(f"{key}{order}")
            self._next_order[key] = order + 1
        self._issued.add(fingerprint)
        return fingerprint


__all__ = ["UUID_NAMESPACE", "FingerprintRegistry", "stable_id", "explicit_id", "fallback_key"]
