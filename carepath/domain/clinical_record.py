"""Clinical Record Schema Definitions.

This module defines the canonical data models for the clinical entities handled by
CarePath: the write-side Patient snapshot and the read-side HistoricalRecord with its
Admission and Medication entries.

Security Impact:
    - Schema validation prevents malformed snapshots from reaching the graph store
    - Identifiers are validated as non-blank before they can be used as lookup keys
    - Type safety enforced at runtime via Pydantic V2

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Models are immutable and validated before use
    - JSON aliases keep the camelCase wire shape used by intake clients
"""

from datetime import date as CalendarDate, datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, ValidationError as PydanticValidationError

from carepath.domain.ports import ValidationError


class Patient(BaseModel):
    """Write-side patient snapshot submitted by intake.

    Each submission is an immutable snapshot; it is never updated in place.

    Parameters:
        id: Patient identifier (unique per patient)
        age: Age in years
        previous_admissions: Count of previous admissions
        chronic_conditions: Chronic-condition labels, in submission order
        medications: Current medication names, in submission order
    """

    id: str = Field(..., description="Patient identifier")
    age: int = Field(..., ge=0, description="Age in years")
    previous_admissions: int = Field(
        default=0,
        ge=0,
        alias="previousAdmissions",
        description="Count of previous admissions"
    )
    chronic_conditions: list[str] = Field(
        default_factory=list,
        alias="chronicConditions",
        description="Chronic-condition labels"
    )
    medications: list[str] = Field(
        default_factory=list,
        description="Current medication names"
    )

    @field_validator("id")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Reject empty or whitespace-only identifiers.

        Security Impact: The identifier is the exact-match lookup key in the
        graph store. Its content is otherwise opaque and is escaped by the
        store adapter, so no character whitelist is applied here.
        """
        if not v.strip():
            raise ValueError("Patient identifier cannot be empty or whitespace only")
        return v

    @property
    def primary_condition(self) -> Optional[str]:
        """First chronic condition, or None when the list is empty."""
        return self.chronic_conditions[0] if self.chronic_conditions else None

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the camelCase wire shape."""
        return self.model_dump(by_alias=True)

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
    )


class Admission(BaseModel):
    """A single hospital admission in a patient's history.

    Parameters:
        date: Admission date (ISO-8601 calendar date)
        diagnosis: Free-text diagnosis label
        treatment: Free-text treatment label
    """

    date: CalendarDate = Field(..., description="Admission date")
    diagnosis: str = Field(default="", description="Diagnosis label")
    treatment: str = Field(default="", description="Treatment label")

    @field_validator("date", mode="before")
    @classmethod
    def parse_calendar_date(cls, v):
        """Accept ISO dates and ISO datetimes, keeping only the calendar date.

        The store may hand back a date predicate as a full datetime string
        (``2024-03-01T00:00:00Z``); only the calendar part is meaningful here.
        """
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10 and v[10] in "T ":
            return v[:10]
        return v

    model_config = ConfigDict(frozen=True)


class Medication(BaseModel):
    """A medication entry in a patient's history."""

    name: str = Field(..., description="Medication name")
    dosage: str = Field(default="", description="Quantity and unit, free text")

    model_config = ConfigDict(frozen=True)


class HistoricalRecord(BaseModel):
    """Read-side history for one patient, decoded from the graph store.

    Admission and medication lists are never null: a missing or null list in
    the store payload decodes to an empty list. The store does not guarantee
    admission order, use ``chronological_admissions`` wherever order matters.

    Parameters:
        name: Patient identifier as stored
        age: Age recorded by the latest snapshot
        condition: Condition fact recorded by the latest snapshot
        admissions: Admission entries
        medications: Medication entries
    """

    name: str = Field(..., description="Patient identifier")
    age: Optional[int] = Field(None, description="Age in years")
    condition: Optional[str] = Field(None, description="Stored chronic-condition fact")
    admissions: list[Admission] = Field(default_factory=list)
    medications: list[Medication] = Field(default_factory=list)

    @field_validator("admissions", "medications", mode="before")
    @classmethod
    def default_missing_list(cls, v):
        if v is None:
            return []
        return v

    def chronological_admissions(self) -> list[Admission]:
        """Admissions sorted oldest-first by date (stable for equal dates)."""
        return sorted(self.admissions, key=lambda admission: admission.date)

    model_config = ConfigDict(frozen=True)


def parse_patient(payload: Mapping[str, Any]) -> Patient:
    """Build a Patient from a raw mapping, surfacing schema errors as ValidationError.

    Parameters:
        payload: Decoded request body (camelCase or snake_case keys)

    Returns:
        Patient: Validated snapshot

    Raises:
        ValidationError: If the payload does not describe a valid patient
    """
    try:
        return Patient.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid patient payload: {e.error_count()} error(s)",
            operation="parse_patient",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
