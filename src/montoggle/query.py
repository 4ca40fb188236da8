"""Point queries against a Directory snapshot.

Every query treats an unknown identifier as absent: callers get False or
None back, never an exception, because "no external output" is a normal
state for a laptop.
"""

from __future__ import annotations

import logging

from .models import Directory, Output, Position, Resolution, Roles

log = logging.getLogger(__name__)


class OutputQuery:
    """Read-only questions about the outputs in one snapshot."""

    def __init__(self, directory: Directory) -> None:
        self._directory = directory

    def get(self, identifier: str | None) -> Output | None:
        if not identifier:
            return None
        return self._directory.get(identifier)

    def is_connected(self, identifier: str | None) -> bool:
        output = self.get(identifier)
        return output is not None and output.is_connected

    def is_active(self, identifier: str | None) -> bool:
        output = self.get(identifier)
        return output is not None and output.is_active

    def current_resolution(self, identifier: str | None) -> Resolution | None:
        output = self.get(identifier)
        return output.current_resolution if output else None

    def preferred_resolution(self, identifier: str | None) -> Resolution | None:
        output = self.get(identifier)
        return output.preferred_resolution if output else None

    def position(self, identifier: str | None) -> Position | None:
        output = self.get(identifier)
        return output.position if output else None

    def supports(self, identifier: str | None, resolution: Resolution) -> bool:
        output = self.get(identifier)
        return output is not None and resolution in output.available_resolutions

    def resolve_external(self, internal_id: str) -> str | None:
        """First connected output in listing order that is not *internal_id*."""
        for output in self._directory.connected():
            if output.identifier != internal_id:
                return output.identifier
        return None

    def resolve_roles(self, internal: str, external: str = "") -> Roles:
        """Assign roles, auto-detecting the external output unless configured.

        Detection runs on every invocation; hot-plug state can change
        between calls.
        """
        if self.get(internal) is None:
            log.warning("Internal output %s is not in the xrandr listing", internal)
        if external:
            return Roles(internal=internal, external=external)
        detected = self.resolve_external(internal)
        log.info("Detected external output: %s", detected or "none")
        return Roles(internal=internal, external=detected)

    def external_available(self, roles: Roles) -> bool:
        """True if the external role is assigned and its output is connected."""
        return roles.external is not None and self.is_connected(roles.external)

    def stale_outputs(self) -> list[str]:
        """Unplugged outputs whose CRTC was never released."""
        return [o.identifier for o in self._directory.stale()]
