"""Services Layer — permission resolution, authorization decisions, and RBAC seeding.

Invariants:
    - Services depend on core/ protocols, never on FastAPI request objects
    - Every authorization decision reads the store fresh (no cache)
"""
