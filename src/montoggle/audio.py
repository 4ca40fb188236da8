"""Audio routing via pactl (PulseAudio / PipeWire)."""

from __future__ import annotations

import logging
import subprocess
from enum import Enum

from .utils import format_command, run_command

log = logging.getLogger(__name__)

VOLUME_STEP = 5  # percent


class AudioProfile(Enum):
    HDMI = "output:hdmi-stereo+input:analog-stereo"
    ANALOG = "output:analog-stereo+input:analog-stereo"
    OFF = "off"


class PactlAudio:
    """Switch the card profile and default sink volume.

    Calls are fire-and-forget: a failure is logged and reported through the
    return value, never raised.
    """

    def __init__(self, card: str = "0", *, dry_run: bool = False) -> None:
        self._card = card
        self._dry_run = dry_run

    def _run(self, args: list[str]) -> bool:
        argv = ["pactl", *args]
        if self._dry_run:
            print("command:", format_command(argv))
            return True
        try:
            run_command(argv)
        except FileNotFoundError:
            log.warning("pactl is not installed")
            return False
        except subprocess.CalledProcessError as e:
            log.warning("pactl exit %d stderr: %s", e.returncode, (e.stderr or "").strip())
            return False
        return True

    def set_profile(self, profile: AudioProfile) -> bool:
        log.info("Audio profile for card %s: %s", self._card, profile.value)
        return self._run(["set-card-profile", self._card, profile.value])

    def change_volume(self, percent: int) -> bool:
        """Raise (positive) or lower (negative) the default sink volume."""
        return self._run(["set-sink-volume", "@DEFAULT_SINK@", f"{percent:+d}%"])
