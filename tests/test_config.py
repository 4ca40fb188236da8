import pytest

from montoggle.config import ConfigError, Settings
from montoggle.models import Roles
from montoggle.query import OutputQuery
from montoggle.xrandr import parse_listing


def test_internal_required():
    with pytest.raises(ConfigError, match="MONTOGGLE_INTERNAL"):
        Settings(internal="  ")


def test_external_must_differ():
    with pytest.raises(ConfigError):
        Settings(internal="eDP1", external="eDP1")


def test_external_optional():
    settings = Settings(internal="eDP1")
    assert not settings.external_configured
    assert Settings(internal="eDP1", external="HDMI1").external_configured


def test_padded_values_are_stripped():
    settings = Settings(internal=" eDP1\n", external="HDMI1 ", audio_card=" 1")
    assert (settings.internal, settings.external, settings.audio_card) == ("eDP1", "HDMI1", "1")


def test_padded_external_matching_internal_is_rejected():
    with pytest.raises(ConfigError):
        Settings(internal="eDP1", external=" eDP1 ")


def test_padded_internal_is_not_detected_as_external():
    settings = Settings(internal=" eDP1")
    query = OutputQuery(parse_listing("eDP1 connected\n   1920x1200 * +\n"))
    roles = query.resolve_roles(settings.internal, settings.external)
    assert roles == Roles(internal="eDP1", external=None)
    assert query.is_active(roles.internal)
