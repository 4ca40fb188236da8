"""Current-mode inference and the round-robin controller.

No mode identifier is ever stored, so the current mode is reconstructed
from what xrandr reports: which outputs are active, whether each shows its
preferred resolution, and where the external output sits.

Known limitation: when both outputs have the same preferred resolution and
both show it, a mirror and a side-by-side layout look identical by
resolution. The external output's offset decides: a non-origin offset is
read as presentation, the origin as a clone. The two clone modes cannot be
told apart in that case either, so the cycle wraps to internal-only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .actions import ModeActions
from .models import Mode, Resolution, Roles
from .query import OutputQuery

log = logging.getLogger(__name__)

CYCLE: tuple[Mode, ...] = (
    Mode.INTERNAL_ONLY,
    Mode.PRESENTATION,
    Mode.CLONE_TOWARD_EXTERNAL,
    Mode.CLONE_TOWARD_INTERNAL,
    Mode.EXTERNAL_ONLY,
)


def following(mode: Mode) -> Mode:
    """The mode after *mode* in the fixed cycle."""
    return CYCLE[(CYCLE.index(mode) + 1) % len(CYCLE)]


@dataclass(frozen=True)
class Inference:
    current: Mode | None
    next: Mode
    reason: str


def infer(query: OutputQuery, roles: Roles) -> Inference:
    """Classify the current layout and choose the next mode."""
    internal = roles.internal

    if not query.external_available(roles):
        current = Mode.INTERNAL_ONLY if query.is_active(internal) else None
        return Inference(current, Mode.INTERNAL_ONLY, "no external output")

    external = roles.external
    internal_on = query.is_active(internal)
    external_on = query.is_active(external)

    if internal_on and not external_on:
        return _by_cycle(Mode.INTERNAL_ONLY, "only internal active")
    if external_on and not internal_on:
        return _by_cycle(Mode.EXTERNAL_ONLY, "only external active")
    if not internal_on and not external_on:
        return Inference(None, Mode.INTERNAL_ONLY, "no output active")

    internal_pref = query.preferred_resolution(internal)
    external_pref = query.preferred_resolution(external)
    internal_native = _is_native(query.current_resolution(internal), internal_pref)
    external_native = _is_native(query.current_resolution(external), external_pref)

    if internal_native and external_native:
        if internal_pref != external_pref:
            return _by_cycle(Mode.PRESENTATION, "both native, different preferred")
        position = query.position(external)
        if position is not None and not position.is_origin:
            return _by_cycle(Mode.PRESENTATION, "both native, external offset")
        return Inference(
            Mode.CLONE_TOWARD_EXTERNAL, Mode.INTERNAL_ONLY, "both native at origin (ambiguous clone)",
        )
    if internal_native:
        return _by_cycle(Mode.CLONE_TOWARD_INTERNAL, "external scaled to internal")
    return _by_cycle(Mode.CLONE_TOWARD_EXTERNAL, "internal scaled to external")


def infer_current_mode(query: OutputQuery, roles: Roles) -> Mode | None:
    return infer(query, roles).current


def next_mode(query: OutputQuery, roles: Roles) -> Mode:
    return infer(query, roles).next


def round_robin(actions: ModeActions, resolution: Resolution | None = None) -> Mode:
    """Infer the current mode from the snapshot and switch to the next one."""
    inference = infer(actions.query, actions.roles)
    log.info(
        "Current mode: %s (%s); switching to %s",
        inference.current.value if inference.current else "unknown",
        inference.reason,
        inference.next.value,
    )
    actions.apply(inference.next, resolution)
    return inference.next


def _by_cycle(current: Mode, reason: str) -> Inference:
    return Inference(current, following(current), reason)


def _is_native(current: Resolution | None, preferred: Resolution | None) -> bool:
    return current is not None and current == preferred
