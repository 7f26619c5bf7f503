from __future__ import annotations

from pathlib import Path

import pytest

from ideapadctl import api
from ideapadctl.core.errors import MethodNotFoundError
from ideapadctl.core.model import Profile
from ideapadctl.core.profile_loader import load_profiles
from ideapadctl.core.service import IdeapadService

_SBMC = {
    0x03: ("conservation", 1),
    0x05: ("conservation", 0),
    0x07: ("rapid_charge", 1),
    0x08: ("rapid_charge", 0),
}
_DYTC = {0x000FB001: 0, 0x0012B001: 1, 0x0013B001: 2}


class FakeEmbeddedController:
    """Answers the ACPI methods used by the packaged IdeaPad profiles."""

    def __init__(self) -> None:
        self.conservation = 0
        self.rapid_charge = 0
        self.spmo = 0
        self.fcmo = 0
        self.calls: list[tuple[str, int | None]] = []
        self.failures: dict[tuple[str, int | None], Exception] = {}

    def invoke(self, method: str, argument: int | None = None) -> int:
        self.calls.append((method, argument))
        name = method.rsplit(".", 1)[-1]
        failure = self.failures.get((name, argument))
        if failure is not None:
            raise failure

        if name == "BTSM":
            return self.conservation
        if name == "QCHO":
            return self.rapid_charge
        if name == "SPMO":
            return self.spmo
        if name == "FCMO":
            return self.fcmo
        if name == "SBMC" and argument in _SBMC:
            attribute, value = _SBMC[argument]
            setattr(self, attribute, value)
            return 0
        if name == "DYTC" and argument in _DYTC:
            self.spmo = self.fcmo = _DYTC[argument]
            return 0
        raise MethodNotFoundError(method)

    def writes(self) -> list[tuple[str, int | None]]:
        return [call for call in self.calls if call[1] is not None]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr(api, "_ACTIVE", None)


@pytest.fixture
def profile() -> Profile:
    return load_profiles().profiles["ideapad_15iil05"]


@pytest.fixture
def ec() -> FakeEmbeddedController:
    return FakeEmbeddedController()


@pytest.fixture
def service(profile: Profile, ec: FakeEmbeddedController) -> IdeapadService:
    return IdeapadService(profile, gateway=ec)
