"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass

INTERNAL_ENV = "MONTOGGLE_INTERNAL"
EXTERNAL_ENV = "MONTOGGLE_EXTERNAL"
AUDIO_CARD_ENV = "MONTOGGLE_AUDIO_CARD"


class ConfigError(Exception):
    """Required configuration is missing or inconsistent."""


@dataclass(frozen=True)
class Settings:
    internal: str = ""
    external: str = ""          # empty = auto-detect on every invocation
    audio_card: str = "0"

    def __post_init__(self) -> None:
        # env values may carry stray whitespace from shell rc files
        for name in ("internal", "external", "audio_card"):
            object.__setattr__(self, name, getattr(self, name).strip())
        if not self.internal:
            raise ConfigError(
                f"internal output is not set; export {INTERNAL_ENV} "
                f"(e.g. {INTERNAL_ENV}=eDP1) or pass --internal"
            )
        if self.external and self.external == self.internal:
            raise ConfigError(
                f"{EXTERNAL_ENV} and {INTERNAL_ENV} both name {self.internal!r}"
            )

    @property
    def external_configured(self) -> bool:
        return bool(self.external)
