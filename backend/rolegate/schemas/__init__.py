"""Pydantic Schemas — response contracts for API endpoints.

Invariants:
    - Schemas validate at system boundary (API responses)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
