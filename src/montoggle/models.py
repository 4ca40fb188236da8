"""Data models: Resolution, Output, Directory, Mode, OutputConfig."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from .config import ConfigError


# ── Enums ────────────────────────────────────────────────────────────────

class ConnectionState(Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Mode(Enum):
    INTERNAL_ONLY = "internal_only"
    EXTERNAL_ONLY = "external_only"
    CLONE_TOWARD_INTERNAL = "clone_toward_internal"
    CLONE_TOWARD_EXTERNAL = "clone_toward_external"
    PRESENTATION = "presentation"

    @property
    def label(self) -> str:
        labels = {
            "internal_only": "Internal display only",
            "external_only": "External display only",
            "clone_toward_internal": "Clone (internal resolution)",
            "clone_toward_external": "Clone (external resolution)",
            "presentation": "Presentation (side by side)",
        }
        return labels[self.value]

    @property
    def needs_external(self) -> bool:
        return self is not Mode.INTERNAL_ONLY


# ── Resolution ───────────────────────────────────────────────────────────

class Resolution(NamedTuple):
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"

    @classmethod
    def parse(cls, text: str) -> Resolution:
        """Parse ``"1920x1080"`` into a Resolution.

        Raises ValueError for anything that is not two positive integers
        joined by ``x``.
        """
        w, sep, h = text.strip().lower().partition("x")
        if not sep or not w.isdigit() or not h.isdigit():
            raise ValueError(f"not a WxH resolution: {text!r}")
        res = cls(int(w), int(h))
        if res.width == 0 or res.height == 0:
            raise ValueError(f"resolution must be non-zero: {text!r}")
        return res


class Position(NamedTuple):
    x: int
    y: int

    @property
    def is_origin(self) -> bool:
        return self.x == 0 and self.y == 0


# ── Output / Directory ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Output:
    # Identity (from the xrandr header line), e.g. "eDP1", "HDMI-1"
    identifier: str
    connection_state: ConnectionState = ConnectionState.DISCONNECTED

    # Applied mode
    is_active: bool = False
    current_resolution: Resolution | None = None
    position: Position | None = None

    # Unplugged while still holding a CRTC: the header keeps its geometry
    is_stale: bool = False

    # Catalog
    preferred_resolution: Resolution | None = None
    available_resolutions: frozenset[Resolution] = field(default_factory=frozenset)

    @property
    def is_connected(self) -> bool:
        return self.connection_state is ConnectionState.CONNECTED


class Directory(Mapping[str, Output]):
    """Read-only, ordered mapping of output identifier to Output.

    Built from a single listing snapshot and discarded at the end of the
    invocation.
    """

    def __init__(self, outputs: list[Output] | tuple[Output, ...] = ()) -> None:
        self._outputs = MappingProxyType({o.identifier: o for o in outputs})

    def __getitem__(self, identifier: str) -> Output:
        return self._outputs[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._outputs)

    def __len__(self) -> int:
        return len(self._outputs)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {list(self._outputs.values())!r}>"

    def connected(self) -> list[Output]:
        """Connected outputs in listing order."""
        return [o for o in self._outputs.values() if o.is_connected]

    def stale(self) -> list[Output]:
        """Disconnected outputs that still occupy screen area."""
        return [o for o in self._outputs.values() if o.is_stale]


# ── Roles ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Roles:
    internal: str
    external: str | None = None

    def __post_init__(self) -> None:
        if self.external is not None and self.external == self.internal:
            raise ConfigError(
                f"internal and external output are both set to {self.internal!r}"
            )


# ── OutputConfig ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OutputConfig:
    """Desired configuration for one output in one backend call."""

    name: str
    enabled: bool = True

    # None means let the backend pick (xrandr --auto)
    mode: Resolution | None = None

    # Position: explicit coordinates, or placed to the right of another output
    pos: Position | None = None
    right_of: str = ""

    primary: bool = False

    # Mirror scaling: render a framebuffer area of this size on the output
    scale_from: Resolution | None = None

    def to_xrandr_args(self) -> list[str]:
        """Generate xrandr arguments for this output (without the ``xrandr`` prefix)."""
        if not self.enabled:
            return ["--output", self.name, "--off"]

        parts = ["--output", self.name]

        # Resolution
        if self.mode is not None:
            parts += ["--mode", str(self.mode)]
        else:
            parts.append("--auto")

        # Position
        if self.right_of:
            parts += ["--right-of", self.right_of]
        elif self.pos is not None:
            parts += ["--pos", f"{self.pos.x}x{self.pos.y}"]

        # Scale: always emit one so a stale clone scaling is reset
        if self.scale_from is not None:
            parts += ["--scale-from", str(self.scale_from)]
        else:
            parts += ["--scale", "1x1"]

        if self.primary:
            parts.append("--primary")

        return parts


# A Step is one backend call; steps of an action run in order.
Step = list[OutputConfig]
