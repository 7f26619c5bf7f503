from __future__ import annotations

import threading

import pytest

from ideapadctl.core.errors import ConflictDetectedError, UnknownPresetError
from ideapadctl.core.model import (
    ControlCode,
    Feature,
    FeatureState,
    Handler,
    MatchRules,
    Operation,
    PerformancePreset,
    Profile,
    StateDecoding,
)
from ideapadctl.core.service import IdeapadService


def test_feature_lookup(service: IdeapadService) -> None:
    assert service.feature(Feature.BATTERY_CONSERVATION) is service.battery_conservation
    assert service.feature(Feature.RAPID_CHARGE) is service.rapid_charge
    assert service.feature(Feature.PERFORMANCE_MODE) is service.performance_mode


def test_status_reports_every_feature(service: IdeapadService, ec) -> None:
    ec.rapid_charge = 1
    ec.spmo = ec.fcmo = 1

    report = service.status()

    assert report.profile.id == "ideapad_15iil05"
    assert report.states == {
        Feature.BATTERY_CONSERVATION: FeatureState.DISABLED,
        Feature.RAPID_CHARGE: FeatureState.ENABLED,
    }
    assert report.preset_supported
    assert report.preset is PerformancePreset.EXTREME_PERFORMANCE
    assert ec.writes() == []


def test_status_skips_undeclared_features(ec) -> None:
    profile = Profile(
        id="conservation_only",
        name="Conservation Only",
        match=MatchRules(product_names=("0000",)),
        codes={
            (Feature.BATTERY_CONSERVATION, Operation.QUERY): ControlCode(
                method="\\_SB.PCI0.LPCB.EC0.BTSM",
                states=StateDecoding(enabled=1, disabled=0),
            )
        },
    )

    report = IdeapadService(profile, gateway=ec).status()

    assert report.states == {Feature.BATTERY_CONSERVATION: FeatureState.DISABLED}
    assert not report.preset_supported
    assert report.preset is None


def test_enabled_for_scope_restores_disabled_state(service: IdeapadService) -> None:
    with service.battery_conservation.enabled_for_scope():
        assert service.battery_conservation.enabled()
    assert service.battery_conservation.disabled()


def test_enabled_for_scope_restores_on_exception(service: IdeapadService) -> None:
    with pytest.raises(RuntimeError):
        with service.rapid_charge.enabled_for_scope():
            raise RuntimeError("boom")
    assert service.rapid_charge.disabled()


def test_enabled_for_scope_with_error_handler_refuses_on_conflict(service: IdeapadService) -> None:
    service.battery_conservation.enable()

    with pytest.raises(ConflictDetectedError):
        with service.rapid_charge.enabled_for_scope(Handler.ERROR):
            pass

    assert service.battery_conservation.enabled()


def test_disabled_for_scope_re_enables(service: IdeapadService) -> None:
    service.battery_conservation.enable()

    with service.battery_conservation.disabled_for_scope():
        assert service.battery_conservation.disabled()
        service.rapid_charge.enable()

    assert service.battery_conservation.enabled()
    assert service.rapid_charge.disabled()


def test_preset_for_scope_restores_previous(service: IdeapadService) -> None:
    service.performance_mode.set_preset(PerformancePreset.BATTERY_SAVING)

    with service.performance_mode.preset_for_scope(PerformancePreset.EXTREME_PERFORMANCE):
        assert service.performance_mode.preset() is PerformancePreset.EXTREME_PERFORMANCE

    assert service.performance_mode.preset() is PerformancePreset.BATTERY_SAVING


def test_preset_for_scope_refuses_unknown_previous(service: IdeapadService, ec) -> None:
    ec.spmo = ec.fcmo = 9

    with pytest.raises(UnknownPresetError):
        with service.performance_mode.preset_for_scope(PerformancePreset.EXTREME_PERFORMANCE):
            pass

    assert ec.writes() == []


def test_concurrent_enables_leave_one_feature_enabled(service: IdeapadService) -> None:
    barrier = threading.Barrier(2)
    errors: list[Exception] = []

    def worker(name: str) -> None:
        try:
            barrier.wait()
            for _ in range(50):
                getattr(service, name).enable()
        except Exception as exc:
            errors.append(exc)

    threads = [
        threading.Thread(target=worker, args=("battery_conservation",)),
        threading.Thread(target=worker, args=("rapid_charge",)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert service.battery_conservation.enabled() != service.rapid_charge.enabled()
