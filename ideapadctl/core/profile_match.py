"""Hardware-to-profile matching logic."""

from __future__ import annotations

import logging

from ideapadctl.core.model import Profile

LOGGER = logging.getLogger(__name__)


def matches_product(product_name: str, profile: Profile) -> bool:
    normalized = product_name.strip().upper()
    return normalized in profile.match.product_names


def profile_for_product(product_name: str, profiles: dict[str, Profile]) -> Profile | None:
    candidates = [profile for profile in profiles.values() if matches_product(product_name, profile)]
    if not candidates:
        return None
    if len(candidates) > 1:
        LOGGER.warning(
            "Product '%s' matches several profiles (%s); using '%s'",
            product_name,
            ", ".join(p.id for p in candidates),
            candidates[0].id,
        )
    return candidates[0]
