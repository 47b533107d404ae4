"""API Layer — FastAPI routes, authorization guard, and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Guarded routes declare their requirement through api/guard.py only
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to services and repositories (ADR: impureim sandwich)
"""
