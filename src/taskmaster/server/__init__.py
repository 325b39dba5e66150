"""Persistence service: FastAPI app over a flat JSON task file."""
