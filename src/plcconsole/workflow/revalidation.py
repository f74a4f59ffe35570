"""Post-command revalidation — detect that the device changed underneath us."""

from __future__ import annotations

import logging

from plcconsole.device.models import TrustState
from plcconsole.workflow.states import WorkflowContext, WorkflowState

logger = logging.getLogger(__name__)


def check_for_changes(ctx: WorkflowContext) -> WorkflowState | None:
    """Return the state to fall back to, or None if everything still holds.

    Checks run in a fixed order and each match prints its message, but the
    last match decides the target: identity, then certificate, then password.
    """
    session = ctx.session
    if not session.connected:
        return None

    target: WorkflowState | None = None

    if session.identity_changed:
        ctx.io.write_line()
        ctx.say("identityCrisisError", style="yellow")
        target = WorkflowState.IP_ADDRESS_ENTRY

    if session.trust_required and session.trust_state is TrustState.SELECTION_NEEDED:
        ctx.io.write_line()
        ctx.say("certificateChanged", style="yellow")
        target = WorkflowState.CERTIFICATE_TRUST_SELECTION

    if session.password_required and not session.password_valid:
        ctx.io.write_line()
        ctx.say("passwordChange", style="yellow")
        target = WorkflowState.PASSWORD_ENTRY

    if target is not None:
        logger.info("Revalidation reverted workflow to %s", target.value)
    return target
