"""Domain-specific errors for ideapadctl."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ideapadctl.core.model import Feature


class IdeapadError(Exception):
    """Base error for ideapadctl."""


class TransportError(IdeapadError):
    """Base transport error."""


class TransportUnavailableError(TransportError):
    """Raised when the acpi_call channel is missing or not accessible."""


class MethodNotFoundError(TransportError):
    """Raised when the firmware has no ACPI method at the requested path."""

    def __init__(self, method: str) -> None:
        super().__init__(
            f"ACPI method '{method}' not found; the selected profile probably does not match this machine"
        )
        self.method = method


class CallFailedError(TransportError):
    """Raised on any other acpi_call failure."""


class OperationNotSupportedError(IdeapadError):
    """Raised when a profile does not declare a feature/operation pair."""


class ProfileError(IdeapadError):
    """Base profile error."""


class ProfileNotDetectedError(ProfileError):
    """Raised when no profile matches the running hardware."""


class HardwareIdentityError(ProfileNotDetectedError):
    """Raised when the machine's product identifier cannot be read."""


class ProfileValidationError(ProfileError):
    """Raised when a profile file does not conform to schema or semantics."""


class ProfileLoadError(ProfileError):
    """Raised when loading profile sources fails."""


class ConflictDetectedError(IdeapadError):
    """Raised by the error handler when the exclusive partner feature is enabled."""

    def __init__(self, feature: Feature, blocker: Feature) -> None:
        super().__init__(
            f"{blocker.value} is enabled, disable it before enabling {feature.value}"
        )
        self.feature = feature
        self.blocker = blocker


class PresetError(IdeapadError):
    """Base performance preset error."""


class PresetMismatchError(PresetError):
    """Raised when the two performance readbacks disagree."""


class UnknownPresetError(PresetError):
    """Raised when a preset is required but the hardware reading is unrecognized."""


class InitializationError(IdeapadError):
    """Base error for process-wide initialization."""


class AlreadyInitializedError(InitializationError):
    """Raised when re-initializing with a different profile."""


class NotInitializedError(InitializationError):
    """Raised when the active service is requested before initialization."""
