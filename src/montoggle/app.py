"""Single-select picker application used by interactive mode."""

from __future__ import annotations

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Adw, Gdk, Gio, Gtk

from .utils import APP_ID


class PickerWindow(Adw.ApplicationWindow):
    """A list of options; activating a row reports it, Escape cancels."""

    def __init__(self, app: Adw.Application, title: str, options: list[str], on_chosen) -> None:
        super().__init__(application=app, title=title, default_width=360)
        self._options = options
        self._on_chosen = on_chosen

        listbox = Gtk.ListBox(selection_mode=Gtk.SelectionMode.NONE)
        listbox.add_css_class("boxed-list")
        for option in options:
            listbox.append(Adw.ActionRow(title=option, activatable=True))
        listbox.connect("row-activated", self._on_row_activated)

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        box.set_margin_top(12)
        box.set_margin_bottom(12)
        box.set_margin_start(12)
        box.set_margin_end(12)
        box.append(listbox)

        view = Adw.ToolbarView()
        view.add_top_bar(Adw.HeaderBar())
        view.set_content(box)
        self.set_content(view)

        keys = Gtk.EventControllerKey()
        keys.connect("key-pressed", self._on_key_pressed)
        self.add_controller(keys)

    def _on_row_activated(self, _listbox: Gtk.ListBox, row: Gtk.ListBoxRow) -> None:
        self._on_chosen(self._options[row.get_index()])
        self.close()

    def _on_key_pressed(self, _ctrl, keyval: int, _keycode: int, _state) -> bool:
        if keyval == Gdk.KEY_Escape:
            self.close()
            return True
        return False


class PickerApp(Adw.Application):
    """Runs one PickerWindow and remembers the chosen option."""

    def __init__(self, title: str, options: list[str]) -> None:
        super().__init__(
            application_id=f"{APP_ID}.picker",
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS,
        )
        self._title = title
        self._options = options
        self.choice: str | None = None

    def do_activate(self) -> None:
        win = self.get_active_window()
        if win is None:
            win = PickerWindow(self, self._title, self._options, self._set_choice)
        win.present()

    def _set_choice(self, choice: str) -> None:
        self.choice = choice


def pick(title: str, options: list[str]) -> str | None:
    """Block until the user picks an option or closes the window."""
    app = PickerApp(title, list(options))
    app.run([])
    return app.choice
