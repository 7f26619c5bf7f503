"""Feature controllers: one hardware call per operation, no conflict policy."""

from __future__ import annotations

import logging

from ideapadctl.core.errors import OperationNotSupportedError, PresetMismatchError
from ideapadctl.core.model import (
    Feature,
    FeatureState,
    Operation,
    PerformancePreset,
    Profile,
)
from ideapadctl.transports.base import Gateway

LOGGER = logging.getLogger(__name__)


class ToggleController:
    def __init__(self, feature: Feature, profile: Profile, gateway: Gateway) -> None:
        if feature is Feature.PERFORMANCE_MODE:
            raise ValueError("performance mode is not an on/off feature")
        self.feature = feature
        self.profile = profile
        self.gateway = gateway

    def query(self) -> FeatureState:
        code = self.profile.resolve(self.feature, Operation.QUERY)
        raw = self.gateway.invoke(code.method, code.argument)
        state = self.profile.decode(self.feature, raw)
        if state is FeatureState.UNKNOWN:
            LOGGER.debug("%s: unrecognized reading %#x", self.feature.value, raw)
        return state

    def enabled(self) -> bool:
        return self.query() is FeatureState.ENABLED

    def disabled(self) -> bool:
        return self.query() is FeatureState.DISABLED

    def enable_unchecked(self) -> None:
        self._call(Operation.ENABLE)

    def disable_unchecked(self) -> None:
        self._call(Operation.DISABLE)

    def _call(self, operation: Operation) -> None:
        code = self.profile.resolve(self.feature, operation)
        self.gateway.invoke(code.method, code.argument)
        LOGGER.info("%s: %s", self.feature.value, operation.value)


class PerformanceModeController:
    feature = Feature.PERFORMANCE_MODE

    def __init__(self, profile: Profile, gateway: Gateway) -> None:
        self.profile = profile
        self.gateway = gateway

    def set_preset(self, preset: PerformancePreset) -> None:
        code = self.profile.resolve(self.feature, Operation.SET_PRESET)
        argument = code.presets.argument(preset) if code.presets else None
        if argument is None:
            raise OperationNotSupportedError(
                f"Profile '{self.profile.id}' does not define preset '{preset.value}'"
            )
        self.gateway.invoke(code.method, argument)
        LOGGER.info("%s: set %s", self.feature.value, preset.value)

    def preset(self) -> PerformancePreset | None:
        """Read the current preset, or None when the reading is not recognized.

        When the profile declares a second readback, both must agree.
        """
        code = self.profile.resolve(self.feature, Operation.QUERY)
        raw = self.gateway.invoke(code.method, code.argument)
        preset = self.profile.decode_preset(raw)

        if self.profile.supports(self.feature, Operation.VERIFY):
            verify_code = self.profile.resolve(self.feature, Operation.VERIFY)
            verify_raw = self.gateway.invoke(verify_code.method, verify_code.argument)
            verified = self.profile.decode_preset(verify_raw, Operation.VERIFY)
            if preset is not None and verified is not None and preset is not verified:
                raise PresetMismatchError(
                    f"Conflicting performance readings: {code.method}={raw:#x} ({preset.value}), "
                    f"{verify_code.method}={verify_raw:#x} ({verified.value})"
                )
            if preset is None or verified is None:
                LOGGER.debug("%s: unrecognized readings %#x / %#x", self.feature.value, raw, verify_raw)
                return None
        elif preset is None:
            LOGGER.debug("%s: unrecognized reading %#x", self.feature.value, raw)
        return preset
