"""Subset of SARIF 2.1.0 produced by the Parasoft XSLT conversion.

Only the fields the extractor reads are modelled; everything else in the
document is ignored so newer stylesheet output keeps validating.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _SarifModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class Message(_SarifModel):
    text: Optional[str] = None


class ArtifactLocation(_SarifModel):
    uri: Optional[str] = None


class Region(_SarifModel):
    start_line: Optional[int] = Field(default=None, alias="startLine")
    end_line: Optional[int] = Field(default=None, alias="endLine")


class PhysicalLocation(_SarifModel):
    artifact_location: Optional[ArtifactLocation] = Field(default=None, alias="artifactLocation")
    region: Optional[Region] = None


class Location(_SarifModel):
    physical_location: Optional[PhysicalLocation] = Field(default=None, alias="physicalLocation")


class Rule(_SarifModel):
    id: str
    short_description: Optional[Message] = Field(default=None, alias="shortDescription")
    full_description: Optional[Message] = Field(default=None, alias="fullDescription")
    properties: Dict[str, Any] = Field(default_factory=dict)


class Driver(_SarifModel):
    name: str = ""
    rules: List[Rule] = Field(default_factory=list)


class Tool(_SarifModel):
    driver: Driver


class Result(_SarifModel):
    rule_id: Optional[str] = Field(default=None, alias="ruleId")
    level: Optional[str] = None
    message: Message = Field(default_factory=Message)
    locations: List[Location] = Field(default_factory=list)
    partial_fingerprints: Dict[str, Any] = Field(default_factory=dict, alias="partialFingerprints")
    suppressions: Optional[List[Dict[str, Any]]] = None
    code_flows: Optional[List[Dict[str, Any]]] = Field(default=None, alias="codeFlows")
    related_locations: Optional[List[Dict[str, Any]]] = Field(default=None, alias="relatedLocations")

    @property
    def first_physical_location(self) -> Optional[PhysicalLocation]:
        if not self.locations:
            return None
        return self.locations[0].physical_location

    @property
    def uri(self) -> str:
        physical = self.first_physical_location
        if physical is None or physical.artifact_location is None:
            return ""
        return physical.artifact_location.uri or ""


class Run(_SarifModel):
    tool: Tool
    results: List[Result] = Field(default_factory=list)


class SarifLog(_SarifModel):
    version: Optional[str] = None
    runs: List[Run] = Field(default_factory=list)


__all__ = [
    "ArtifactLocation",
    "Driver",
    "Location",
    "Message",
    "PhysicalLocation",
    "Region",
    "Result",
    "Rule",
    "Run",
    "SarifLog",
    "Tool",
]
