"""Shared fixtures."""

from __future__ import annotations

import pytest

from fakes import FakeOutput, FakeXrandr, RecordingUI, laptop, monitor
from montoggle.actions import ModeActions
from montoggle.query import OutputQuery
from montoggle.xrandr import parse_listing


@pytest.fixture
def ui() -> RecordingUI:
    return RecordingUI()


@pytest.fixture
def docked() -> FakeXrandr:
    """Laptop panel active, external monitor plugged in but off."""
    return FakeXrandr(laptop(), monitor(), FakeOutput("DP1", connected=False))


@pytest.fixture
def undocked() -> FakeXrandr:
    return FakeXrandr(laptop(), monitor(connected=False))


@pytest.fixture
def make_actions(ui):
    """Build ModeActions over a fresh snapshot of a backend."""

    def _make(backend: FakeXrandr, internal: str = "eDP1", external: str = "") -> ModeActions:
        query = OutputQuery(parse_listing(backend.query()))
        roles = query.resolve_roles(internal, external)
        return ModeActions(backend, ui, query, roles)

    return _make
