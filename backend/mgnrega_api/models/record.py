# backend/mgnrega_api/models/record.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

METRIC_FIELDS = (
    "person_days",
    "households",
    "funds_spent",
    "works_completed",
    "average_wage",
    "women_participation",
)


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


@dataclass(frozen=True)
class MgnregaRecord:
    """One month of scheme activity for a district."""

    district: str
    month: int
    year: int
    person_days: int = 0
    households: int = 0
    funds_spent: float = 0
    works_completed: int = 0
    average_wage: float = 0
    women_participation: float = 0
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)
    fetched_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self):
        return (self.district, self.month, self.year)

    def to_dict(self, include_raw=False):
        out = {
            "district": self.district,
            "month": self.month,
            "year": self.year,
        }
        for name in METRIC_FIELDS:
            out[name] = getattr(self, name)
        for name in ("fetched_at", "created_at", "updated_at"):
            value = getattr(self, name)
            if value is not None:
                out[name] = _iso(value)
        if include_raw:
            out["raw"] = self.raw or {}
        return out


@dataclass
class ResponseEnvelope:
    success: bool
    source: str
    data: Optional[List[MgnregaRecord]] = None
    districts: Optional[List[str]] = None
    district: Optional[str] = None
    note: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def count(self):
        if self.districts is not None:
            return len(self.districts)
        return len(self.data or [])

    def to_dict(self):
        out = {"success": self.success, "source": self.source}
        if self.district is not None:
            out["district"] = self.district
        out["count"] = self.count
        if self.districts is not None:
            out["districts"] = list(self.districts)
        else:
            out["data"] = [r.to_dict() for r in self.data or []]
        out["timestamp"] = self.timestamp.isoformat()
        if self.note:
            out["note"] = self.note
        return out
