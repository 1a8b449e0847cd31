"""Ordered store of the shell's environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


def parse_entry(entry: str) -> tuple[str, str]:
    """Split a ``NAME=value`` entry at its first ``=``."""
    name, sep, value = entry.partition("=")
    if not sep:
        raise ValueError(f"environment entry has no '=': {entry!r}")
    return name, value


class Environment:
    """Environment variables kept in insertion order.

    A name given to a lookup matches the first stored variable whose name
    starts with it, so ``get("PA")`` finds ``PATH``.
    """

    def __init__(self) -> None:
        self._vars: dict[str, str] = {}

    @classmethod
    def from_strings(cls, entries: Iterable[str]) -> "Environment":
        """Build an environment from ``NAME=value`` strings."""
        env = cls()
        for entry in entries:
            env.add(entry)
        return env

    def _lookup(self, name: str) -> str | None:
        return next((key for key in self._vars if key.startswith(name)), None)

    def get(self, name: str) -> str | None:
        """Return the value of the first matching variable, or None."""
        key = self._lookup(name)
        return None if key is None else self._vars[key]

    def exists(self, name: str) -> bool:
        """Tell whether some variable matches ``name``."""
        return self._lookup(name) is not None

    def set(self, name: str, value: str) -> None:
        """Update the first matching variable, or append a new one."""
        key = self._lookup(name)
        self._vars[name if key is None else key] = value

    def add(self, entry: str) -> None:
        """Add or update a variable from a ``NAME=value`` string."""
        self.set(*parse_entry(entry))

    def remove(self, name: str) -> None:
        """Remove the first matching variable; do nothing if none matches."""
        key = self._lookup(name)
        if key is not None:
            del self._vars[key]

    def to_strings(self) -> list[str]:
        """Return the variables as ``NAME=value`` strings."""
        return [f"{name}={value}" for name, value in self._vars.items()]

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._vars.items()))

    def __len__(self) -> int:
        return len(self._vars)