"""Value objects for job postings."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Any

JOB_STATUSES = ("open", "closed", "in_progress", "completed")

# open and closed share a rank: they may toggle until a caregiver is matched
STATUS_RANK = {"open": 0, "closed": 0, "in_progress": 1, "completed": 2}

MIN_HOURLY_RATE = 9860
MAX_HOURLY_RATE = 1_000_000

# Ages outside this range are dropped like other unusable values
MAX_PATIENT_AGE = 150


@dataclass(frozen=True)
class PatientInfo:
    """Descriptor of the person receiving care. Not independently validated."""

    age: int | None = None
    gender: str | None = None
    condition: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PatientInfo:
        if not data:
            return cls()
        age = data.get("age")
        if age is not None and age != "":
            try:
                age = int(age)
            except (TypeError, ValueError):
                age = None
            if age is not None and not 0 <= age <= MAX_PATIENT_AGE:
                age = None
        else:
            age = None
        return cls(age=age, gender=data.get("gender") or None, condition=data.get("condition") or None)

    def to_dict(self) -> dict[str, Any]:
        return {"age": self.age, "gender": self.gender, "condition": self.condition}


@dataclass(frozen=True)
class JobPostingPatch:
    """Optional fields to change on a posting. None means "leave unchanged"."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    care_type: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    hourly_rate: int | None = None
    patient_info: PatientInfo | None = None
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobPostingPatch:
        """Build a patch from a request body, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if "patient_info" in values and values["patient_info"] is not None:
            values["patient_info"] = PatientInfo.from_dict(values["patient_info"])
        return cls(**values)

    def present_fields(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}
