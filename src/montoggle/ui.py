"""User-facing notification and selection capability."""

from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)

NOTIFY_TIMEOUT_MS = 3000
NOTIFY_ICON = "video-display"


class UI(Protocol):
    def notify(self, text: str) -> None: ...

    def select(self, options: list[str], title: str = "") -> str | None: ...


class DesktopUI:
    """Desktop notifications over D-Bus and a GTK picker window.

    Both are side effects only: a missing notification daemon or display
    is logged and otherwise ignored.
    """

    def __init__(self, app_name: str = "montoggle") -> None:
        self._app_name = app_name

    def notify(self, text: str) -> None:
        log.info("Notify: %s", text)
        try:
            import gi
            gi.require_version("Gio", "2.0")
            from gi.repository import Gio, GLib
        except (ImportError, ValueError):
            log.warning("GLib not available, notification skipped")
            return

        try:
            bus = Gio.bus_get_sync(Gio.BusType.SESSION)
            bus.call_sync(
                "org.freedesktop.Notifications",
                "/org/freedesktop/Notifications",
                "org.freedesktop.Notifications",
                "Notify",
                GLib.Variant(
                    "(susssasa{sv}i)",
                    (self._app_name, 0, NOTIFY_ICON, "Display", text, [], {}, NOTIFY_TIMEOUT_MS),
                ),
                GLib.VariantType("(u)"),
                Gio.DBusCallFlags.NONE,
                -1,
                None,
            )
        except GLib.Error as e:
            log.warning("Notification failed: %s", e.message)

    def select(self, options: list[str], title: str = "") -> str | None:
        """Show a single-select list and return the chosen option, or None."""
        from .app import pick

        return pick(title or "Display mode", options)
