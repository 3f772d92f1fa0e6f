"""API route modules."""

from carepath.api.routes import health, patients, risk

__all__ = ["health", "patients", "risk"]
