"""HTTP API for the STF codec (FastAPI app and pydantic models)."""
