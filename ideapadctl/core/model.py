"""Core data models used across loader, controllers, service, and CLI."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from ideapadctl.core.errors import OperationNotSupportedError


class FeatureState(Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    UNKNOWN = "unknown"


class Feature(Enum):
    BATTERY_CONSERVATION = "battery_conservation"
    RAPID_CHARGE = "rapid_charge"
    PERFORMANCE_MODE = "performance_mode"


class Operation(Enum):
    QUERY = "query"
    ENABLE = "enable"
    DISABLE = "disable"
    SET_PRESET = "set_preset"
    VERIFY = "verify"


class PerformancePreset(Enum):
    INTELLIGENT_COOLING = "intelligent_cooling"
    EXTREME_PERFORMANCE = "extreme_performance"
    BATTERY_SAVING = "battery_saving"


class Handler(Enum):
    """What to do when enabling one battery mode conflicts with the other."""

    IGNORE = "ignore"
    SWITCH = "switch"
    ERROR = "error"


DEFAULT_HANDLER = Handler.SWITCH

EXCLUSIVE_FEATURES: Mapping[Feature, Feature] = MappingProxyType(
    {
        Feature.BATTERY_CONSERVATION: Feature.RAPID_CHARGE,
        Feature.RAPID_CHARGE: Feature.BATTERY_CONSERVATION,
    }
)


@dataclass(frozen=True)
class StateDecoding:
    enabled: int
    disabled: int

    def decode(self, raw: int) -> FeatureState:
        if raw == self.enabled:
            return FeatureState.ENABLED
        if raw == self.disabled:
            return FeatureState.DISABLED
        return FeatureState.UNKNOWN


@dataclass(frozen=True)
class PresetEncoding:
    arguments: Mapping[PerformancePreset, int]
    readings: Mapping[PerformancePreset, int]

    def argument(self, preset: PerformancePreset) -> int | None:
        return self.arguments.get(preset)

    def decode(self, raw: int) -> PerformancePreset | None:
        for preset, reading in self.readings.items():
            if reading == raw:
                return preset
        return None


@dataclass(frozen=True)
class ControlCode:
    method: str
    argument: int | None = None
    states: StateDecoding | None = None
    presets: PresetEncoding | None = None


@dataclass(frozen=True)
class MatchRules:
    product_names: tuple[str, ...]


@dataclass(frozen=True)
class Profile:
    """Control codes for one IdeaPad family.

    An incorrect profile may invoke undefined firmware behaviour: nothing here
    checks that the hardware actually implements the declared methods.
    """

    id: str
    name: str
    match: MatchRules
    codes: Mapping[tuple[Feature, Operation], ControlCode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "codes", MappingProxyType(dict(self.codes)))

    def supports(self, feature: Feature, operation: Operation) -> bool:
        return (feature, operation) in self.codes

    def resolve(self, feature: Feature, operation: Operation) -> ControlCode:
        code = self.codes.get((feature, operation))
        if code is None:
            raise OperationNotSupportedError(
                f"Profile '{self.id}' does not define '{operation.value}' for '{feature.value}'"
            )
        return code

    def decode(self, feature: Feature, raw: int) -> FeatureState:
        states = self.resolve(feature, Operation.QUERY).states
        if states is None:
            raise OperationNotSupportedError(
                f"Profile '{self.id}' has no state decoding for '{feature.value}'"
            )
        return states.decode(raw)

    def decode_preset(self, raw: int, operation: Operation = Operation.QUERY) -> PerformancePreset | None:
        presets = self.resolve(Feature.PERFORMANCE_MODE, operation).presets
        if presets is None:
            raise OperationNotSupportedError(
                f"Profile '{self.id}' has no preset decoding for '{operation.value}'"
            )
        return presets.decode(raw)


@dataclass(frozen=True)
class StatusReport:
    profile: Profile
    states: dict[Feature, FeatureState]
    preset: PerformancePreset | None = None
    preset_supported: bool = False
