"""
Status record Pydantic schemas
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EntityState(str, Enum):
    """On/off state reported for an entity"""
    ON = "ON"
    OFF = "OFF"


class SortOrder(str, Enum):
    """Sort order for status store queries"""
    ASC = "asc"
    DESC = "desc"


class StatusRecord(BaseModel):
    """One observation of an entity's state, as stored in the status index"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    entity_id: str = Field(..., alias="container_id", description="Entity identifier")
    state: EntityState = Field(..., alias="status", description="Observed state")
    elapsed_seconds: int = Field(0, ge=0, alias="uptime", description="Seconds the entity has held the state")
    observed_at: datetime = Field(..., alias="last_updated", description="Observation timestamp")
    counter: int = Field(0, description="Sequence number used for ordering")

    @field_validator("observed_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# entity id -> records ordered by observation
StatusIndex = Dict[str, List[StatusRecord]]


class ReportWindow(BaseModel):
    """Half-open reporting window [start, end)"""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> "ReportWindow":
        if self.start >= self.end:
            raise ValueError("window start must be before window end")
        return self

    @property
    def hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600.0


class AggregationResult(BaseModel):
    """Per-window uptime statistics"""
    on_count: int = Field(0, ge=0)
    off_count: int = Field(0, ge=0)
    total_uptime_hours: float = Field(0.0, ge=0.0)

    @property
    def total_count(self) -> int:
        return self.on_count + self.off_count
