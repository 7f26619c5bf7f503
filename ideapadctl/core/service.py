"""Service layer used by the public API and CLI."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ideapadctl.core import conflict
from ideapadctl.core.controllers import PerformanceModeController, ToggleController
from ideapadctl.core.errors import UnknownPresetError
from ideapadctl.core.model import (
    DEFAULT_HANDLER,
    EXCLUSIVE_FEATURES,
    Feature,
    FeatureState,
    Handler,
    Operation,
    PerformancePreset,
    Profile,
    StatusReport,
)
from ideapadctl.transports.acpi_call import AcpiCallGateway
from ideapadctl.transports.base import Gateway


class ExclusiveFeature:
    """Battery conservation or rapid charge, with conflict-aware enabling."""

    def __init__(
        self,
        controller: ToggleController,
        partner: ToggleController,
        lock: threading.RLock,
    ) -> None:
        self.controller = controller
        self.partner = partner
        self._lock = lock

    @property
    def feature(self) -> Feature:
        return self.controller.feature

    def query(self) -> FeatureState:
        with self._lock:
            return self.controller.query()

    def enabled(self) -> bool:
        return self.query() is FeatureState.ENABLED

    def disabled(self) -> bool:
        return self.query() is FeatureState.DISABLED

    def enable_with_handler(self, handler: Handler) -> None:
        with self._lock:
            conflict.enable_with_handler(self.controller, self.partner, handler)

    def enable(self) -> None:
        self.enable_with_handler(DEFAULT_HANDLER)

    def enable_strict(self) -> None:
        self.enable_with_handler(Handler.ERROR)

    def enable_unchecked(self) -> None:
        self.enable_with_handler(Handler.IGNORE)

    def disable(self) -> None:
        with self._lock:
            self.controller.disable_unchecked()

    @contextmanager
    def enabled_for_scope(self, handler: Handler = DEFAULT_HANDLER) -> Iterator[None]:
        self.enable_with_handler(handler)
        try:
            yield
        finally:
            self.disable()

    @contextmanager
    def disabled_for_scope(self, handler: Handler = DEFAULT_HANDLER) -> Iterator[None]:
        self.disable()
        try:
            yield
        finally:
            self.enable_with_handler(handler)


class PerformanceFeature:
    def __init__(self, controller: PerformanceModeController, lock: threading.RLock) -> None:
        self.controller = controller
        self._lock = lock

    @property
    def feature(self) -> Feature:
        return self.controller.feature

    def preset(self) -> PerformancePreset | None:
        with self._lock:
            return self.controller.preset()

    def set_preset(self, preset: PerformancePreset) -> None:
        with self._lock:
            self.controller.set_preset(preset)

    @contextmanager
    def preset_for_scope(self, preset: PerformancePreset) -> Iterator[None]:
        previous = self.preset()
        if previous is None:
            raise UnknownPresetError("Current performance preset is unrecognized; cannot restore it afterwards")
        self.set_preset(preset)
        try:
            yield
        finally:
            self.set_preset(previous)


class IdeapadService:
    def __init__(self, profile: Profile, *, gateway: Gateway | None = None) -> None:
        self.profile = profile
        self.gateway = gateway or AcpiCallGateway()
        self._lock = threading.RLock()

        toggles = {
            feature: ToggleController(feature, profile, self.gateway)
            for feature in EXCLUSIVE_FEATURES
        }
        self.battery_conservation = ExclusiveFeature(
            toggles[Feature.BATTERY_CONSERVATION],
            toggles[EXCLUSIVE_FEATURES[Feature.BATTERY_CONSERVATION]],
            self._lock,
        )
        self.rapid_charge = ExclusiveFeature(
            toggles[Feature.RAPID_CHARGE],
            toggles[EXCLUSIVE_FEATURES[Feature.RAPID_CHARGE]],
            self._lock,
        )
        self.performance_mode = PerformanceFeature(
            PerformanceModeController(profile, self.gateway),
            self._lock,
        )

    def feature(self, feature: Feature) -> ExclusiveFeature | PerformanceFeature:
        if feature is Feature.BATTERY_CONSERVATION:
            return self.battery_conservation
        if feature is Feature.RAPID_CHARGE:
            return self.rapid_charge
        return self.performance_mode

    def status(self) -> StatusReport:
        with self._lock:
            states: dict[Feature, FeatureState] = {}
            for handle in (self.battery_conservation, self.rapid_charge):
                if self.profile.supports(handle.feature, Operation.QUERY):
                    states[handle.feature] = handle.query()

            preset_supported = self.profile.supports(Feature.PERFORMANCE_MODE, Operation.QUERY)
            preset = self.performance_mode.preset() if preset_supported else None

        return StatusReport(
            profile=self.profile,
            states=states,
            preset=preset,
            preset_supported=preset_supported,
        )
