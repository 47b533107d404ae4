"""Route Requirements — explicit authorization metadata resolved at route registration.

Invariants:
    - A field set to None means "not declared"; an empty tuple means "declared empty"
    - resolve_requirement: handler-declared fields override fallback fields, per field
    - mode: non-empty all_of wins over any_of; any_of is then never evaluated
    - Requirements are immutable once resolved

Design Decisions:
    - Value object over handler attributes: resolved once and stored with the route,
      never re-derived per request by introspection
    - Per-field override (not whole-object): a router may declare the public marker while
      a handler declares its permission list, and both survive resolution
    - All-of precedence over any-of is kept for compatibility; dual_declaration()
      lets the registration layer warn or reject (ADR: flag, don't silently alter)
"""

from dataclasses import dataclass

from rolegate.core.domain_types import RequirementMode


@dataclass(frozen=True)
class AuthorizationRequirement:
    """Declared authorization metadata for one route."""
    is_public: bool | None = None
    any_of: tuple[str, ...] | None = None
    all_of: tuple[str, ...] | None = None

    @property
    def public(self) -> bool:
        return bool(self.is_public)

    @property
    def mode(self) -> RequirementMode:
        if self.all_of:
            return RequirementMode.ALL_OF
        if self.any_of:
            return RequirementMode.ANY_OF
        return RequirementMode.NONE


def public() -> AuthorizationRequirement:
    """Route bypasses authorization entirely."""
    return AuthorizationRequirement(is_public=True)


def any_of(*permissions: str) -> AuthorizationRequirement:
    """Route allowed when at least one permission is satisfied."""
    return AuthorizationRequirement(any_of=tuple(permissions))


def all_of(*permissions: str) -> AuthorizationRequirement:
    """Route allowed only when every permission is satisfied."""
    return AuthorizationRequirement(all_of=tuple(permissions))


def no_requirement() -> AuthorizationRequirement:
    return AuthorizationRequirement()


def resolve_requirement(
    handler: AuthorizationRequirement | None,
    fallback: AuthorizationRequirement | None = None,
) -> AuthorizationRequirement:
    """Merge handler-level metadata over router-level fallback, field by field."""
    handler = handler or AuthorizationRequirement()
    fallback = fallback or AuthorizationRequirement()
    return AuthorizationRequirement(
        is_public=_first_declared(handler.is_public, fallback.is_public),
        any_of=_first_declared(handler.any_of, fallback.any_of),
        all_of=_first_declared(handler.all_of, fallback.all_of),
    )


def dual_declaration(requirement: AuthorizationRequirement) -> bool:
    """True when both lists are non-empty — any_of would be silently ignored."""
    return bool(requirement.any_of) and bool(requirement.all_of)


def _first_declared(primary, secondary):
    return primary if primary is not None else secondary
