"""Utility helpers: running and printing external commands."""

from __future__ import annotations

import logging
import shlex
import subprocess

APP_ID = "com.github.montoggle"

log = logging.getLogger(__name__)


def format_command(args: list[str]) -> str:
    """Render an argv list as a copy-pasteable shell command."""
    return " ".join(shlex.quote(a) for a in args)


def run_command(args: list[str]) -> subprocess.CompletedProcess:
    """Run a command, capturing text output; a non-zero exit raises CalledProcessError."""
    log.info("Running: %s", format_command(args))
    return subprocess.run(args, capture_output=True, text=True, check=True)
