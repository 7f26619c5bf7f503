from __future__ import annotations

import pytest

from ideapadctl.core.errors import CallFailedError, ConflictDetectedError
from ideapadctl.core.model import Feature, Handler
from ideapadctl.core.service import IdeapadService

_SBMC = "\\_SB.PCI0.LPCB.EC0.VPC0.SBMC"


@pytest.mark.parametrize("name", ["battery_conservation", "rapid_charge"])
def test_enable_disable_round_trip(service: IdeapadService, name: str) -> None:
    feature = getattr(service, name)

    feature.enable()
    assert feature.enabled()

    feature.disable()
    assert feature.disabled()


def test_switch_disables_partner(service: IdeapadService) -> None:
    service.rapid_charge.enable()
    service.battery_conservation.enable()

    assert service.rapid_charge.disabled()
    assert service.battery_conservation.enabled()


def test_switch_disables_before_enabling(service: IdeapadService, ec) -> None:
    ec.conservation = 1
    service.rapid_charge.enable_with_handler(Handler.SWITCH)
    assert ec.writes() == [(_SBMC, 0x05), (_SBMC, 0x07)]


def test_ignore_leaves_partner_untouched(service: IdeapadService, ec) -> None:
    service.rapid_charge.enable()
    service.battery_conservation.enable_unchecked()

    assert service.rapid_charge.enabled()
    assert service.battery_conservation.enabled()
    assert (_SBMC, 0x08) not in ec.writes()


def test_error_handler_refuses_without_hardware_write(service: IdeapadService, ec) -> None:
    service.battery_conservation.enable()
    ec.calls.clear()

    with pytest.raises(ConflictDetectedError) as exc:
        service.rapid_charge.enable_strict()

    assert exc.value.feature is Feature.RAPID_CHARGE
    assert exc.value.blocker is Feature.BATTERY_CONSERVATION
    assert ec.writes() == []
    assert service.battery_conservation.enabled()
    assert service.rapid_charge.disabled()


@pytest.mark.parametrize("handler", list(Handler))
def test_no_conflict_enables_regardless_of_handler(service: IdeapadService, ec, handler: Handler) -> None:
    service.rapid_charge.enable_with_handler(handler)
    assert ec.writes() == [(_SBMC, 0x07)]
    assert service.rapid_charge.enabled()


@pytest.mark.parametrize("handler", list(Handler))
def test_unknown_partner_state_is_treated_as_not_enabled(
    service: IdeapadService,
    ec,
    handler: Handler,
) -> None:
    ec.rapid_charge = 0x7F
    service.battery_conservation.enable_with_handler(handler)

    assert ec.writes() == [(_SBMC, 0x03)]
    assert service.battery_conservation.enabled()


def test_switch_is_fail_stop_when_disable_fails(service: IdeapadService, ec) -> None:
    ec.rapid_charge = 1
    ec.failures[("SBMC", 0x08)] = CallFailedError("EC busy")

    with pytest.raises(CallFailedError):
        service.battery_conservation.enable()

    assert (_SBMC, 0x03) not in ec.writes()
    assert service.battery_conservation.disabled()
    assert service.rapid_charge.enabled()


def test_disable_does_not_consult_partner(service: IdeapadService, ec) -> None:
    ec.rapid_charge = 1
    service.battery_conservation.disable()
    assert ec.calls == [(_SBMC, 0x05)]
