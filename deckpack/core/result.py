"""Result type for explicit error handling.

Pipeline steps return ``Ok(value)`` or ``Err(error)`` instead of raising, so
the CLI decides in one place how a failure is shown and which exit code it
maps to.

    match collect(...):
        case Ok(bundle):
            console.success(str(bundle.root))
        case Err(error):
            print_release_error(error, console)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
