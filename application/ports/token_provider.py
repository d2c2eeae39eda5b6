"""
Token provider port.

The cloud services only need something that answers "what is the current
authorization header"; TokenService satisfies it, tests pass simple fakes.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    def authorization(self) -> str: ...


__all__ = ["TokenProvider"]
