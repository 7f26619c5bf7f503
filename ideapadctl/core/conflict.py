"""Conflict resolution between battery conservation and rapid charge.

Enabling one while the other is enabled makes the charger keep pushing current
into a capped battery. The resolver consults the partner's state before
committing the enable. An unknown partner state counts as not enabled.
"""

from __future__ import annotations

import logging

from ideapadctl.core.controllers import ToggleController
from ideapadctl.core.errors import ConflictDetectedError
from ideapadctl.core.model import FeatureState, Handler

LOGGER = logging.getLogger(__name__)


def enable_with_handler(
    target: ToggleController,
    partner: ToggleController,
    handler: Handler,
) -> None:
    partner_state = partner.query()
    if partner_state is not FeatureState.ENABLED:
        if partner_state is FeatureState.UNKNOWN:
            LOGGER.debug(
                "%s state unknown; enabling %s without switching",
                partner.feature.value,
                target.feature.value,
            )
        target.enable_unchecked()
        return

    if handler is Handler.ERROR:
        raise ConflictDetectedError(target.feature, partner.feature)

    if handler is Handler.SWITCH:
        # A failed disable propagates before the target is touched.
        partner.disable_unchecked()
    else:
        LOGGER.warning(
            "Enabling %s while %s is enabled",
            target.feature.value,
            partner.feature.value,
        )
    target.enable_unchecked()
