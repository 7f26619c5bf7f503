"""Gateway interfaces."""

from __future__ import annotations

from typing import Protocol


class Gateway(Protocol):
    def invoke(self, method: str, argument: int | None = None) -> int:
        """Call an ACPI method with an optional integer argument and return its integer result."""
