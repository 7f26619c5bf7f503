"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

import typer

from ideapadctl import api
from ideapadctl.core.errors import IdeapadError, ProfileNotDetectedError
from ideapadctl.core.hardware import DMIIdentitySource
from ideapadctl.core.model import (
    DEFAULT_HANDLER,
    Feature,
    FeatureState,
    Handler,
    PerformancePreset,
    Profile,
)
from ideapadctl.core.profile_loader import LoadedProfiles, load_profile_file, load_profiles
from ideapadctl.core.profile_match import profile_for_product
from ideapadctl.core.service import IdeapadService

app = typer.Typer(help="IdeaPad battery and performance mode control via acpi_call")


class Toggle(str, Enum):
    ON = "on"
    OFF = "off"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every ACPI call"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_profiles() -> LoadedProfiles:
    loaded = load_profiles()
    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return loaded


def _build_service(profile_id: str | None, profile_file: Path | None) -> IdeapadService:
    if profile_file is not None:
        return api.initialize_with_profile(load_profile_file(profile_file))

    loaded = _load_profiles()
    if profile_id:
        profile = loaded.profiles.get(profile_id)
        if profile is None:
            raise ProfileNotDetectedError(
                f"Unknown profile '{profile_id}'. Use 'ideapadctl profiles' to inspect available profiles."
            )
        return api.initialize_with_profile(profile)
    return api.initialize()


def _describe_features(profile: Profile) -> dict[str, str]:
    operations: dict[str, list[str]] = {}
    for feature, operation in profile.codes:
        operations.setdefault(feature.value, []).append(operation.value)
    return {feature: ", ".join(ops) for feature, ops in sorted(operations.items())}


def _fail(exc: IdeapadError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@app.command("profiles")
def list_profiles() -> None:
    """List available profiles and the operations they declare."""
    try:
        loaded = _load_profiles()
        if not loaded.profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for profile in sorted(loaded.profiles.values(), key=lambda p: p.id):
            products = ", ".join(profile.match.product_names)
            typer.echo(f"{profile.id}: {profile.name} [{products}]")
            for feature, operations in _describe_features(profile).items():
                typer.echo(f"  {feature}: {operations}")
    except IdeapadError as exc:
        raise _fail(exc) from None


@app.command("detect")
def detect() -> None:
    """Show the machine's product name and the profile it matches."""
    try:
        loaded = _load_profiles()
        product_name = DMIIdentitySource().product_name()
        profile = profile_for_product(product_name, loaded.profiles)
        matched = profile.id if profile else "<no-match>"
        typer.echo(f"{product_name} -> {matched}")
    except IdeapadError as exc:
        raise _fail(exc) from None


@app.command("status")
def status(
    profile: str | None = typer.Option(None, "--profile", help="Profile ID, bypasses detection"),
    profile_file: Path | None = typer.Option(None, "--profile-file", help="Profile YAML file, bypasses detection"),
) -> None:
    """Show the state of every feature the profile supports."""
    try:
        service = _build_service(profile, profile_file)
        report = service.status()
        typer.echo(f"Profile: {report.profile.id} ({report.profile.name})")
        for feature, state in report.states.items():
            typer.echo(f"  {feature.value}: {state.value}")
        if report.preset_supported:
            preset = report.preset.value if report.preset else FeatureState.UNKNOWN.value
            typer.echo(f"  {Feature.PERFORMANCE_MODE.value}: {preset}")
    except IdeapadError as exc:
        raise _fail(exc) from None


def _toggle(
    feature: Feature,
    state: Toggle | None,
    handler: Handler,
    profile: str | None,
    profile_file: Path | None,
) -> None:
    try:
        service = _build_service(profile, profile_file)
        handle = service.feature(feature)
        if state is None:
            typer.echo(f"{feature.value}: {handle.query().value}")
            return
        if state is Toggle.ON:
            handle.enable_with_handler(handler)
        else:
            handle.disable()
        typer.echo(f"{feature.value}: {handle.query().value}")
    except IdeapadError as exc:
        raise _fail(exc) from None


@app.command("conservation")
def conservation(
    state: Toggle | None = typer.Argument(None),
    handler: Handler = typer.Option(DEFAULT_HANDLER, "--handler", help="What to do if rapid charge is enabled"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID, bypasses detection"),
    profile_file: Path | None = typer.Option(None, "--profile-file", help="Profile YAML file, bypasses detection"),
) -> None:
    """Show or set battery conservation mode.

    If STATE is omitted, prints the current state.
    """
    _toggle(Feature.BATTERY_CONSERVATION, state, handler, profile, profile_file)


@app.command("rapid-charge")
def rapid_charge(
    state: Toggle | None = typer.Argument(None),
    handler: Handler = typer.Option(DEFAULT_HANDLER, "--handler", help="What to do if battery conservation is enabled"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID, bypasses detection"),
    profile_file: Path | None = typer.Option(None, "--profile-file", help="Profile YAML file, bypasses detection"),
) -> None:
    """Show or set rapid charge.

    If STATE is omitted, prints the current state.
    """
    _toggle(Feature.RAPID_CHARGE, state, handler, profile, profile_file)


@app.command("performance")
def performance(
    preset: PerformancePreset | None = typer.Argument(None),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID, bypasses detection"),
    profile_file: Path | None = typer.Option(None, "--profile-file", help="Profile YAML file, bypasses detection"),
) -> None:
    """Show or set the system performance preset."""
    try:
        service = _build_service(profile, profile_file)
        if preset is not None:
            service.performance_mode.set_preset(preset)
        current = service.performance_mode.preset()
        value = current.value if current else FeatureState.UNKNOWN.value
        typer.echo(f"{Feature.PERFORMANCE_MODE.value}: {value}")
    except IdeapadError as exc:
        raise _fail(exc) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
