from __future__ import annotations

from collections.abc import Callable


def require_ability(action: str, resource: str) -> Callable:
    """
    Decorator-style API for subject-less checks.

    Implementation detail:
    - This decorator does NOT perform the check itself.
    - It attaches metadata that the global pipeline dependency reads *after*
      routing, once the authorization context exists.
    - Checks that need a subject (ownership, visibility) belong in the handler,
      via `dependencies.ensure_allowed`.
    """

    def decorator(fn: Callable) -> Callable:
        existing = tuple(getattr(fn, "__security_abilities__", ()))
        setattr(fn, "__security_abilities__", existing + ((action, resource),))
        return fn

    return decorator


def required_abilities(endpoint: Callable | None) -> tuple[tuple[str, str], ...]:
    if endpoint is None:
        return ()
    return tuple(getattr(endpoint, "__security_abilities__", ()))
