"""Stable public API for building tooling on top of ideapadctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.

A process has at most one active service. `initialize()` selects a profile by
matching the machine's DMI product name; `initialize_with_profile()` bypasses
detection. Passing the wrong profile may invoke undefined firmware behaviour.
Once set, the active service never changes: repeating `initialize()` returns it
unchanged, and `initialize_with_profile()` with a different profile raises
`AlreadyInitializedError`.
"""

from __future__ import annotations

import logging
import threading

from ideapadctl.core.errors import (
    AlreadyInitializedError,
    CallFailedError,
    ConflictDetectedError,
    HardwareIdentityError,
    IdeapadError,
    InitializationError,
    MethodNotFoundError,
    NotInitializedError,
    OperationNotSupportedError,
    PresetError,
    PresetMismatchError,
    ProfileError,
    ProfileLoadError,
    ProfileNotDetectedError,
    ProfileValidationError,
    TransportError,
    TransportUnavailableError,
    UnknownPresetError,
)
from ideapadctl.core.hardware import DMIIdentitySource, IdentitySource
from ideapadctl.core.model import (
    DEFAULT_HANDLER,
    ControlCode,
    Feature,
    FeatureState,
    Handler,
    MatchRules,
    Operation,
    PerformancePreset,
    PresetEncoding,
    Profile,
    StateDecoding,
    StatusReport,
)
from ideapadctl.core.profile_loader import load_profile_file, load_profiles
from ideapadctl.core.profile_match import profile_for_product
from ideapadctl.core.service import ExclusiveFeature, IdeapadService, PerformanceFeature
from ideapadctl.transports.acpi_call import AcpiCallGateway
from ideapadctl.transports.base import Gateway

__all__ = [
    "IdeapadError",
    "TransportError",
    "TransportUnavailableError",
    "MethodNotFoundError",
    "CallFailedError",
    "OperationNotSupportedError",
    "ProfileError",
    "ProfileNotDetectedError",
    "HardwareIdentityError",
    "ProfileValidationError",
    "ProfileLoadError",
    "ConflictDetectedError",
    "PresetError",
    "PresetMismatchError",
    "UnknownPresetError",
    "InitializationError",
    "AlreadyInitializedError",
    "NotInitializedError",
    "DEFAULT_HANDLER",
    "ControlCode",
    "Feature",
    "FeatureState",
    "Handler",
    "MatchRules",
    "Operation",
    "PerformancePreset",
    "PresetEncoding",
    "Profile",
    "StateDecoding",
    "StatusReport",
    "AcpiCallGateway",
    "Gateway",
    "DMIIdentitySource",
    "IdentitySource",
    "ExclusiveFeature",
    "PerformanceFeature",
    "IdeapadService",
    "load_profiles",
    "load_profile_file",
    "initialize",
    "initialize_with_profile",
    "active",
]

LOGGER = logging.getLogger(__name__)

_INIT_LOCK = threading.Lock()
_ACTIVE: IdeapadService | None = None


def initialize(
    *,
    gateway: Gateway | None = None,
    identity: IdentitySource | None = None,
) -> IdeapadService:
    """Detect the profile for this machine and create the active service.

    No ACPI call is made here; a failed detection leaves the process
    uninitialized.
    """
    global _ACTIVE
    with _INIT_LOCK:
        if _ACTIVE is not None:
            LOGGER.debug("Already initialized with profile '%s'", _ACTIVE.profile.id)
            return _ACTIVE

        loaded = load_profiles()
        product_name = (identity or DMIIdentitySource()).product_name()
        profile = profile_for_product(product_name, loaded.profiles)
        if profile is None:
            raise ProfileNotDetectedError(
                f"No profile matches product '{product_name}'. "
                "Add a profile or pass one explicitly."
            )

        LOGGER.info("Detected profile '%s' for product '%s'", profile.id, product_name)
        _ACTIVE = IdeapadService(profile, gateway=gateway)
        return _ACTIVE


def initialize_with_profile(profile: Profile, *, gateway: Gateway | None = None) -> IdeapadService:
    global _ACTIVE
    with _INIT_LOCK:
        if _ACTIVE is not None:
            if _ACTIVE.profile == profile:
                return _ACTIVE
            raise AlreadyInitializedError(
                f"Already initialized with profile '{_ACTIVE.profile.id}', refusing '{profile.id}'"
            )

        LOGGER.warning(
            "Using profile '%s' without hardware detection; a mismatched profile may "
            "invoke undefined firmware behaviour",
            profile.id,
        )
        _ACTIVE = IdeapadService(profile, gateway=gateway)
        return _ACTIVE


def active() -> IdeapadService:
    if _ACTIVE is None:
        raise NotInitializedError("Call initialize() or initialize_with_profile() first")
    return _ACTIVE
