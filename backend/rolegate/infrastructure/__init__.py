"""Infrastructure Layer — database access and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All SQLAlchemy errors mapped to DatabaseError at the session boundary

Design Decisions:
    - Repository implements core/repository_protocols.py structurally (no inheritance)
"""
