"""Hardware identity sources used for profile auto-selection."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ideapadctl.core.errors import HardwareIdentityError

DMI_PRODUCT_NAME_PATH = Path("/sys/class/dmi/id/product_name")


class IdentitySource(Protocol):
    def product_name(self) -> str:
        """Return the running machine's product identifier, e.g. '81YK'."""


class DMIIdentitySource:
    def __init__(self, path: Path = DMI_PRODUCT_NAME_PATH) -> None:
        self.path = path

    def product_name(self) -> str:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise HardwareIdentityError(f"Could not read product name from {self.path}: {exc}") from exc
        if not value:
            raise HardwareIdentityError(f"Empty product name in {self.path}")
        return value
