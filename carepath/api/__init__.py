"""HTTP transport for CarePath (FastAPI)."""
