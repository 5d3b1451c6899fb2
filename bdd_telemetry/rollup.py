"""Status derivation for result tree nodes."""

from collections.abc import Sequence

from bdd_telemetry.models.events import (
    INCOMPLETE_STATUSES,
    TERMINAL_STATUSES,
    Status,
)


def derive_step_status(*, finished: bool, reported: Status | None) -> Status:
    """A step carries its reported status once finished, else ``pending``."""
    if not finished or reported is None:
        return "pending"
    return reported


def derive_node_status(
    *,
    finished: bool,
    reported: Status | None,
    hook_failed: bool,
    children: Sequence[Status],
) -> Status:
    """Derive a scenario or feature status from its own outcome and children.

    The node stays ``pending`` until it is finished or every child is
    terminal. After that, in precedence order: a failure anywhere (child,
    own finish, hook) fails the node; an incomplete child fails the node;
    a childless node takes its own outcome; all-skipped children skip it;
    anything else passes.
    """
    settled = bool(children) and all(child in TERMINAL_STATUSES for child in children)
    if not finished and not settled:
        return "pending"

    if hook_failed or reported == "failed" or "failed" in children:
        return "failed"
    if any(child in INCOMPLETE_STATUSES for child in children):
        return "failed"
    if not children:
        if reported is None or reported in INCOMPLETE_STATUSES:
            return "failed"
        return reported
    if all(child == "skipped" for child in children):
        return "skipped"
    return "passed"
