"""Pydantic schemas mapping SenML wire labels onto the record models."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.records import RawRecord, Record

SENML_NAMESPACE = "urn:ietf:params:xml:ns:senml"


class RecordSchema(BaseModel):
    """One SenML record keyed by its RFC 8428 labels."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    base_name: Optional[str] = Field(default=None, alias="bn")
    base_time: Optional[float] = Field(default=None, alias="bt")
    base_unit: Optional[str] = Field(default=None, alias="bu")
    base_value: Optional[float] = Field(default=None, alias="bv")
    base_sum: Optional[float] = Field(default=None, alias="bs")
    base_version: Optional[int] = Field(default=None, alias="bver")
    name: Optional[str] = Field(default=None, alias="n")
    unit: Optional[str] = Field(default=None, alias="u")
    value: Optional[float] = Field(default=None, alias="v")
    string_value: Optional[str] = Field(default=None, alias="vs")
    bool_value: Optional[bool] = Field(default=None, alias="vb")
    data_value: Optional[str] = Field(default=None, alias="vd")
    sum: Optional[float] = Field(default=None, alias="s")
    time: Optional[float] = Field(default=None, alias="t")
    update_time: Optional[float] = Field(default=None, alias="ut")
    link: Optional[str] = Field(default=None, alias="l")

    @model_validator(mode="before")
    @classmethod
    def _reject_must_understand(cls, data: Any) -> Any:
        if isinstance(data, dict):
            unknown = sorted(
                key for key in data if isinstance(key, str) and key.endswith("_")
            )
            if unknown:
                raise ValueError(
                    f"Unsupported must-understand fields: {', '.join(unknown)}"
                )
        return data

    def to_record(self) -> RawRecord:
        return RawRecord(**self.model_dump())

    @classmethod
    def from_record(cls, record: Record) -> "RecordSchema":
        return cls.model_validate(asdict(record))

    def to_wire(self) -> Dict[str, Any]:
        """Labelled fields with absent ones dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)
