from __future__ import annotations

import pytest

from ideapadctl.core.errors import OperationNotSupportedError
from ideapadctl.core.model import (
    ControlCode,
    Feature,
    FeatureState,
    MatchRules,
    Operation,
    Profile,
    StateDecoding,
)


@pytest.mark.parametrize("raw", [0, 1, 2, 0xFF, 0xFFFFFFFF, -1, 0x0012B001])
def test_decode_is_total(profile: Profile, raw: int) -> None:
    state = profile.decode(Feature.BATTERY_CONSERVATION, raw)
    assert state in {FeatureState.ENABLED, FeatureState.DISABLED, FeatureState.UNKNOWN}
    assert profile.decode(Feature.BATTERY_CONSERVATION, raw) is state


def test_decode_sentinels(profile: Profile) -> None:
    assert profile.decode(Feature.RAPID_CHARGE, 1) is FeatureState.ENABLED
    assert profile.decode(Feature.RAPID_CHARGE, 0) is FeatureState.DISABLED
    assert profile.decode(Feature.RAPID_CHARGE, 2) is FeatureState.UNKNOWN


def test_resolve_undeclared_operation_raises() -> None:
    profile = Profile(
        id="partial",
        name="Partial",
        match=MatchRules(product_names=("0000",)),
        codes={
            (Feature.BATTERY_CONSERVATION, Operation.QUERY): ControlCode(
                method="\\_SB.PCI0.LPCB.EC0.BTSM",
                states=StateDecoding(enabled=1, disabled=0),
            )
        },
    )

    assert profile.supports(Feature.BATTERY_CONSERVATION, Operation.QUERY)
    with pytest.raises(OperationNotSupportedError):
        profile.resolve(Feature.BATTERY_CONSERVATION, Operation.ENABLE)
    with pytest.raises(OperationNotSupportedError):
        profile.decode(Feature.RAPID_CHARGE, 1)


def test_profile_codes_are_read_only(profile: Profile) -> None:
    with pytest.raises(TypeError):
        profile.codes[(Feature.RAPID_CHARGE, Operation.ENABLE)] = ControlCode(method="X")  # type: ignore[index]
