"""Mode actions: compute the per-output configuration for a mode and apply it."""

from __future__ import annotations

import logging

from .models import Mode, OutputConfig, Position, Resolution, Roles, Step
from .query import OutputQuery
from .ui import UI
from .xrandr import DisplayBackend

log = logging.getLogger(__name__)

ORIGIN = Position(0, 0)

UNAVAILABLE_SUFFIX = "not available (no external output connected)"


def unavailable_message(mode: Mode) -> str:
    """Message reported when *mode* needs an external output that is missing."""
    return f"{mode.value}: {UNAVAILABLE_SUFFIX}"


class ExternalUnavailable(Exception):
    """The mode needs an external output and none is connected."""

    def __init__(self, mode: Mode) -> None:
        super().__init__(unavailable_message(mode))
        self.mode = mode


class ModeActions:
    """One action per display mode over a single directory snapshot.

    Planning is pure: ``plan()`` returns the ordered backend steps without
    touching the backend. ``apply()`` checks availability before issuing
    anything, then runs the steps in order; a failing step raises
    BackendError and the remaining steps are not attempted.
    """

    def __init__(self, backend: DisplayBackend, ui: UI, query: OutputQuery, roles: Roles) -> None:
        self.backend = backend
        self.ui = ui
        self.query = query
        self.roles = roles

    # ── Public actions ───────────────────────────────────────────────

    def internal_only(self, resolution: Resolution | None = None) -> bool:
        return self.apply(Mode.INTERNAL_ONLY, resolution)

    def external_only(self, resolution: Resolution | None = None) -> bool:
        return self.apply(Mode.EXTERNAL_ONLY, resolution)

    def clone_toward_internal(self, resolution: Resolution | None = None) -> bool:
        return self.apply(Mode.CLONE_TOWARD_INTERNAL, resolution)

    def clone_toward_external(self, resolution: Resolution | None = None) -> bool:
        return self.apply(Mode.CLONE_TOWARD_EXTERNAL, resolution)

    def presentation(self, resolution: Resolution | None = None) -> bool:
        return self.apply(Mode.PRESENTATION, resolution)

    def apply(self, mode: Mode, resolution: Resolution | None = None) -> bool:
        """Switch to *mode*. Returns False if the mode is not available."""
        try:
            steps = self.plan(mode, resolution)
        except ExternalUnavailable as e:
            log.warning("%s", e)
            self.ui.notify(str(e))
            return False

        log.info("Switching to %s (%d step(s))", mode.value, len(steps))
        for step in steps:
            self.backend.apply(step)
        self.ui.notify(mode.label)
        return True

    # ── Planning ─────────────────────────────────────────────────────

    def plan(self, mode: Mode, resolution: Resolution | None = None) -> list[Step]:
        """Ordered backend steps that realize *mode*.

        Raises ExternalUnavailable when *mode* needs an external output
        that is not connected.
        """
        planners = {
            Mode.INTERNAL_ONLY: self._plan_internal_only,
            Mode.EXTERNAL_ONLY: self._plan_external_only,
            Mode.CLONE_TOWARD_INTERNAL: self._plan_clone_toward_internal,
            Mode.CLONE_TOWARD_EXTERNAL: self._plan_clone_toward_external,
            Mode.PRESENTATION: self._plan_presentation,
        }
        return planners[mode](resolution)

    def _target(self, identifier: str, override: Resolution | None) -> Resolution | None:
        """Override if given, else the preferred resolution (None = auto)."""
        if override is None:
            return self.query.preferred_resolution(identifier)
        if not self.query.supports(identifier, override):
            log.warning("%s does not list %s; passing it to xrandr anyway", identifier, override)
        return override

    def _require_external(self, mode: Mode) -> str:
        if mode.needs_external and not self.query.external_available(self.roles):
            raise ExternalUnavailable(mode)
        return self.roles.external

    def _plan_internal_only(self, resolution: Resolution | None) -> list[Step]:
        internal = self.roles.internal
        external = self.roles.external
        off = [external] if external and self.query.get(external) else []
        # Outputs unplugged while active still hold screen area until turned off
        off += [n for n in self.query.stale_outputs() if n not in off and n != internal]
        step: Step = [OutputConfig(name, enabled=False) for name in off]
        step.append(OutputConfig(
            internal, mode=self._target(internal, resolution), pos=ORIGIN, primary=True,
        ))
        return [step]

    def _plan_external_only(self, resolution: Resolution | None) -> list[Step]:
        external = self._require_external(Mode.EXTERNAL_ONLY)
        return [[
            OutputConfig(self.roles.internal, enabled=False),
            OutputConfig(
                external, mode=self._target(external, resolution), pos=ORIGIN, primary=True,
            ),
        ]]

    def _plan_clone_toward_internal(self, resolution: Resolution | None) -> list[Step]:
        external = self._require_external(Mode.CLONE_TOWARD_INTERNAL)
        internal = self.roles.internal
        anchor = self._target(internal, resolution)
        return [
            [OutputConfig(internal, mode=anchor, pos=ORIGIN, primary=True)],
            [OutputConfig(
                external,
                mode=self.query.preferred_resolution(external),
                pos=ORIGIN,
                scale_from=anchor,
            )],
        ]

    def _plan_clone_toward_external(self, resolution: Resolution | None) -> list[Step]:
        external = self._require_external(Mode.CLONE_TOWARD_EXTERNAL)
        internal = self.roles.internal
        anchor = self._target(external, resolution)
        return [
            [OutputConfig(
                internal,
                mode=self.query.preferred_resolution(internal),
                pos=ORIGIN,
                scale_from=anchor,
            )],
            [OutputConfig(external, mode=anchor, pos=ORIGIN, primary=True)],
        ]

    def _plan_presentation(self, resolution: Resolution | None) -> list[Step]:
        external = self._require_external(Mode.PRESENTATION)
        internal = self.roles.internal
        steps: list[Step] = []

        # Reset external first; positioning relative to a display that is
        # still in a clone transform is rejected by the backend.
        if self.query.is_active(external):
            steps.append([OutputConfig(external, enabled=False)])

        internal_res = self.query.preferred_resolution(internal)
        steps.append([OutputConfig(internal, mode=internal_res, pos=ORIGIN, primary=True)])

        ext_mode = self._target(external, resolution)
        if internal_res is not None:
            steps.append([OutputConfig(
                external, mode=ext_mode, pos=Position(internal_res.width, 0),
            )])
        else:
            steps.append([OutputConfig(external, mode=ext_mode, right_of=internal)])
        return steps
