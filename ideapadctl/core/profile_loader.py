"""Profile loading and validation for YAML-based ideapadctl profiles."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from ideapadctl.core.errors import ProfileLoadError, ProfileValidationError
from ideapadctl.core.model import (
    ControlCode,
    Feature,
    MatchRules,
    Operation,
    PerformancePreset,
    PresetEncoding,
    Profile,
    StateDecoding,
)
from ideapadctl.transports.acpi_call import is_valid_method

_TOGGLE_FEATURES = (Feature.BATTERY_CONSERVATION, Feature.RAPID_CHARGE)
_TOGGLE_OPERATIONS = (Operation.QUERY, Operation.ENABLE, Operation.DISABLE)
_PRESET_OPERATIONS = (Operation.QUERY, Operation.VERIFY, Operation.SET_PRESET)
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, Profile]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("ideapadctl.schemas").joinpath("profile.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "ideapadctl/profiles", xdg_data / "ideapadctl/profiles"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _normalize_method(value: str, *, context: str) -> str:
    method = value.strip()
    if not is_valid_method(method):
        raise ProfileValidationError(
            f"{context} must be an ACPI path such as '\\_SB.PCI0.LPCB.EC0.BTSM'"
        )
    return method


def _normalize_product_name(name: str) -> str:
    return name.strip().upper()


def _build_toggle_codes(
    feature: Feature,
    definition: dict[str, Any],
    *,
    profile_id: str,
) -> dict[tuple[Feature, Operation], ControlCode]:
    states: StateDecoding | None = None
    if "states" in definition:
        states = StateDecoding(
            enabled=int(definition["states"]["enabled"]),
            disabled=int(definition["states"]["disabled"]),
        )
        if states.enabled == states.disabled:
            raise ProfileValidationError(
                f"{profile_id}.{feature.value}.states must use distinct enabled/disabled values"
            )

    codes: dict[tuple[Feature, Operation], ControlCode] = {}
    for operation in _TOGGLE_OPERATIONS:
        entry = definition.get(operation.value)
        if entry is None:
            continue
        context = f"{profile_id}.{feature.value}.{operation.value}"
        codes[(feature, operation)] = ControlCode(
            method=_normalize_method(entry["method"], context=f"{context}.method"),
            argument=int(entry["argument"]) if "argument" in entry else None,
            states=states if operation is Operation.QUERY else None,
        )
    return codes


def _build_preset_codes(
    definition: dict[str, Any],
    *,
    profile_id: str,
) -> dict[tuple[Feature, Operation], ControlCode]:
    feature = Feature.PERFORMANCE_MODE
    arguments: dict[PerformancePreset, int] = {}
    readings: dict[PerformancePreset, int] = {}
    verify_readings: dict[PerformancePreset, int] = {}
    for preset_name, preset_entry in definition["presets"].items():
        preset = PerformancePreset(preset_name)
        arguments[preset] = int(preset_entry["argument"])
        readings[preset] = int(preset_entry["reading"])
        verify_readings[preset] = int(preset_entry.get("verify_reading", preset_entry["reading"]))

    for name, values in (("reading", readings), ("verify_reading", verify_readings)):
        if len(set(values.values())) != len(values):
            raise ProfileValidationError(
                f"{profile_id}.{feature.value}.presets must use distinct {name} values"
            )

    codes: dict[tuple[Feature, Operation], ControlCode] = {}
    for operation in _PRESET_OPERATIONS:
        entry = definition.get(operation.value)
        if entry is None:
            continue
        context = f"{profile_id}.{feature.value}.{operation.value}"
        encoding = PresetEncoding(
            arguments=arguments,
            readings=verify_readings if operation is Operation.VERIFY else readings,
        )
        codes[(feature, operation)] = ControlCode(
            method=_normalize_method(entry["method"], context=f"{context}.method"),
            presets=encoding,
        )
    return codes


def _build_profile(doc: dict[str, Any], source: Path | Traversable) -> Profile:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    codes: dict[tuple[Feature, Operation], ControlCode] = {}
    features = doc["features"]
    for feature in _TOGGLE_FEATURES:
        if feature.value in features:
            codes.update(_build_toggle_codes(feature, features[feature.value], profile_id=doc["id"]))
    if Feature.PERFORMANCE_MODE.value in features:
        codes.update(_build_preset_codes(features[Feature.PERFORMANCE_MODE.value], profile_id=doc["id"]))

    return Profile(
        id=doc["id"],
        name=doc["name"],
        match=MatchRules(
            product_names=tuple(_normalize_product_name(p) for p in doc["match"]["product_names"]),
        ),
        codes=codes,
    )


def _iter_packaged_profile_paths() -> list[Traversable]:
    profile_root = resources.files("ideapadctl.profiles")
    return [item for item in profile_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_profile_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _profile_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_profile_file(path: Path) -> Profile:
    return _build_profile(_read_yaml(path), path)


def load_profiles() -> LoadedProfiles:
    profiles: dict[str, Profile] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_profile_paths(), key=lambda p: p.name):
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        profiles[profile.id] = profile

    for path in _iter_user_profile_paths():
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        if profile.id in profiles:
            warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
