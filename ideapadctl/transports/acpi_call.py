"""Gateway implementation on top of the acpi_call kernel module.

acpi_call support is very basic: commands are not verified, the only argument
type used here is an unsigned integer, and only integer results are accepted.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

from ideapadctl.core.errors import (
    CallFailedError,
    MethodNotFoundError,
    TransportUnavailableError,
)

ACPI_CALL_PATH = Path("/proc/acpi/call")

_METHOD_RE = re.compile(r"^(?:\\|\^+)?[A-Z_][A-Z0-9_]{0,3}(?:\.[A-Z_][A-Z0-9_]{0,3})*$")
_AE_NOT_FOUND = "AE_NOT_FOUND"
LOGGER = logging.getLogger(__name__)


class _CallFile(Protocol):
    def write_text(self, data: str, encoding: str | None = ...) -> int: ...

    def read_text(self, encoding: str | None = ...) -> str: ...


def is_valid_method(method: str) -> bool:
    return _METHOD_RE.match(method) is not None


def _parse_output(output: str, method: str) -> int:
    if output.startswith("Error: "):
        message = output[len("Error: "):].strip()
        if message == _AE_NOT_FOUND:
            raise MethodNotFoundError(method)
        raise CallFailedError(f"acpi_call failed for '{method}': {message}")

    try:
        if output.lower().startswith("0x"):
            return int(output, 16)
        return int(output)
    except ValueError as exc:
        raise CallFailedError(
            f"Unrecognized output from acpi_call for '{method}': '{output}'"
        ) from exc


class AcpiCallGateway:
    def __init__(self, path: Path | _CallFile = ACPI_CALL_PATH) -> None:
        self.path = path

    def invoke(self, method: str, argument: int | None = None) -> int:
        if not is_valid_method(method):
            raise CallFailedError(f"Malformed ACPI method path '{method}'")
        if argument is not None and argument < 0:
            raise CallFailedError(f"acpi_call only accepts unsigned arguments, got {argument}")

        command = method if argument is None else f"{method} {argument}"
        LOGGER.debug("acpi_call <- %s", command)

        try:
            self.path.write_text(command, encoding="ascii")
        except FileNotFoundError as exc:
            raise TransportUnavailableError(
                f"{self.path} not found; load the acpi_call kernel module"
            ) from exc
        except PermissionError as exc:
            raise TransportUnavailableError(
                f"Permission denied writing {self.path}; root privileges are required"
            ) from exc
        except OSError as exc:
            raise CallFailedError(f"acpi_call write failed for '{method}': {exc}") from exc

        try:
            output = self.path.read_text(encoding="latin-1")
        except OSError as exc:
            raise CallFailedError(f"acpi_call read failed for '{method}': {exc}") from exc

        output = output.rstrip("\x00").strip()
        LOGGER.debug("acpi_call -> %s", output)
        return _parse_output(output, method)
