"""
Solver backends for pwl-constraints.

Each backend is a BaseEncoder subclass that translates a query of
bounds, equations and piecewise-linear constraints to one solver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pwl_constraints.backends.base import BaseEncoder

# Registry of available backends
_BACKENDS: dict[str, type["BaseEncoder"] | None] = {}


def register_backend(name: str, backend_class: type["BaseEncoder"]) -> None:
    """Register a backend class."""
    _BACKENDS[name.lower()] = backend_class


def get_backend(name: str) -> type["BaseEncoder"] | None:
    """
    Get a backend class by name.

    Returns None if the backend is not available (dependencies not installed).
    """
    name_lower = name.lower()

    # Lazy load backends to avoid import errors when deps missing
    if name_lower not in _BACKENDS:
        _try_load_backend(name_lower)

    return _BACKENDS.get(name_lower)


def _try_load_backend(name: str) -> None:
    """Try to load a backend, catching import errors."""
    if name == "z3":
        try:
            from pwl_constraints.backends.z3_backend import Z3Encoder
            _BACKENDS["z3"] = Z3Encoder
        except ImportError:
            _BACKENDS["z3"] = None

    elif name == "ortools":
        try:
            from pwl_constraints.backends.ortools_backend import ORToolsEncoder
            _BACKENDS["ortools"] = ORToolsEncoder
        except ImportError:
            _BACKENDS["ortools"] = None


def available_backends() -> list[str]:
    """Return list of available backend names."""
    # Try loading all known backends
    for name in ["z3", "ortools"]:
        if name not in _BACKENDS:
            _try_load_backend(name)

    return [name for name, cls in _BACKENDS.items() if cls is not None]


__all__ = ["get_backend", "register_backend", "available_backends"]
