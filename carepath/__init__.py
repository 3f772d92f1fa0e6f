"""CarePath: patient history, readmission risk and intervention recommendations."""

__version__ = "1.0.0"
