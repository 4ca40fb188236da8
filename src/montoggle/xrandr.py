"""xrandr communication: listing parser and command-line backend."""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .models import (
    ConnectionState,
    Directory,
    Output,
    Position,
    Resolution,
    Step,
)
from .utils import format_command, run_command

log = logging.getLogger(__name__)

# Output-introducing line, e.g.
#   eDP1 connected primary 1920x1080+0+0 (normal left inverted right ...) 294mm x 165mm
#   eDP1 connected 1080x1920+0+0 left (normal left inverted right ...) 294mm x 165mm
#   HDMI1 disconnected (normal left inverted right x axis y axis)
_HEADER_RE = re.compile(
    r"^(?P<name>\S+)\s+(?P<state>connected|disconnected)\b"
    r"(?:\s+primary)?"
    r"(?:\s+(?P<width>\d+)x(?P<height>\d+)\+(?P<x>-?\d+)\+(?P<y>-?\d+)"
    r"(?:\s+(?P<rotation>left|right|inverted)\b)?)?"
)

# Indented mode line, e.g. "   1920x1080     60.00*+  59.94    50.00"
_MODE_RE = re.compile(r"^\s+(?P<width>\d+)x(?P<height>\d+)[^\s*+]*(?P<rest>.*)$")


class BackendError(Exception):
    """The display-configuration backend failed or is unavailable."""


class DisplayBackend(Protocol):
    def query(self) -> str: ...

    def apply(self, step: Step) -> None: ...


# ── Parser ───────────────────────────────────────────────────────────────

class LineKind(Enum):
    HEADER = "header"
    MODE = "mode"
    OTHER = "other"


def classify_line(line: str) -> tuple[LineKind, re.Match | None]:
    """Classify one listing line as an output header, a mode line, or other."""
    match = _HEADER_RE.match(line)
    if match:
        return LineKind.HEADER, match
    match = _MODE_RE.match(line)
    if match:
        return LineKind.MODE, match
    return LineKind.OTHER, None


@dataclass
class _OutputBuilder:
    """Fold state for the output currently being scanned."""

    name: str
    connected: bool
    geometry: Resolution | None = None
    position: Position | None = None
    active_mode: Resolution | None = None
    preferred: Resolution | None = None
    modes: list[Resolution] = field(default_factory=list)

    @classmethod
    def from_header(cls, match: re.Match) -> _OutputBuilder:
        builder = cls(name=match["name"], connected=match["state"] == "connected")
        if match["width"] is not None:
            width, height = int(match["width"]), int(match["height"])
            # Geometry is reported after rotation; modes are listed unrotated
            if match["rotation"] in ("left", "right"):
                width, height = height, width
            builder.geometry = Resolution(width, height)
            builder.position = Position(int(match["x"]), int(match["y"]))
        return builder

    def add_mode(self, match: re.Match) -> None:
        res = Resolution(int(match["width"]), int(match["height"]))
        if res not in self.modes:
            self.modes.append(res)
        tokens = match["rest"].split()
        if self.active_mode is None and any("*" in t for t in tokens):
            self.active_mode = res
        if self.preferred is None and any(
            t.rstrip("*").endswith("+") or t == "+preferred" for t in tokens
        ):
            self.preferred = res

    def build(self) -> Output:
        if not self.connected:
            # Stale modes of an unplugged port are not meaningful
            return Output(
                self.name, ConnectionState.DISCONNECTED, is_stale=self.geometry is not None,
            )

        active = self.active_mode is not None
        return Output(
            identifier=self.name,
            connection_state=ConnectionState.CONNECTED,
            is_active=active,
            # The header geometry is the framebuffer area the output shows,
            # which differs from the mode when --scale-from is in effect.
            current_resolution=(self.geometry or self.active_mode) if active else None,
            position=self.position if active else None,
            preferred_resolution=self.preferred,
            available_resolutions=frozenset(self.modes),
        )


def parse_listing(text: str) -> Directory:
    """Parse ``xrandr --query`` output into a Directory.

    Two states: outside any output, or inside one. A header line opens a
    new output; mode lines attach to the open output; an unindented line
    that is not a header (the ``Screen 0:`` banner, ``unknown connection``
    ports) closes it. Indented non-mode lines are ignored.
    """
    outputs: list[Output] = []
    current: _OutputBuilder | None = None

    for line in text.splitlines():
        kind, match = classify_line(line)
        if kind is LineKind.HEADER:
            if current is not None:
                outputs.append(current.build())
            current = _OutputBuilder.from_header(match)
        elif kind is LineKind.MODE:
            if current is not None:
                current.add_mode(match)
        elif line.strip() and not line[0].isspace():
            if current is not None:
                outputs.append(current.build())
            current = None

    if current is not None:
        outputs.append(current.build())

    return Directory(outputs)


# ── Backend ──────────────────────────────────────────────────────────────

class XrandrBackend:
    """Query and configure outputs via the xrandr command line tool."""

    def __init__(self, *, dry_run: bool = False) -> None:
        self._dry_run = dry_run

    def _run(self, args: list[str]) -> str:
        try:
            proc = run_command(["xrandr", *args])
        except FileNotFoundError as e:
            raise BackendError("xrandr is not installed") from e
        except subprocess.CalledProcessError as e:
            log.error("xrandr exit %d stderr: %s", e.returncode, (e.stderr or "").strip())
            raise BackendError(
                f"xrandr returned error code {e.returncode}: {(e.stderr or '').strip()}"
            ) from e
        return proc.stdout

    def query(self) -> str:
        """Return the raw ``xrandr --query`` listing."""
        return self._run(["--query"])

    def apply(self, step: Step) -> None:
        """Apply one step (a set of output configurations) in a single call."""
        args: list[str] = []
        for cfg in step:
            args.extend(cfg.to_xrandr_args())
        if not args:
            return
        if self._dry_run:
            print("command:", format_command(["xrandr", *args]))
            return
        self._run(args)
