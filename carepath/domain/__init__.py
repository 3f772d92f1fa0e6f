"""Domain layer for CarePath.

This module contains the clinical data model, the intervention rule engine and
the ports that adapters implement. Domain models depend on nothing beyond Pydantic.
"""

from .clinical_record import (
    Patient,
    Admission,
    Medication,
    HistoricalRecord,
)

__all__ = [
    "Patient",
    "Admission",
    "Medication",
    "HistoricalRecord",
]
