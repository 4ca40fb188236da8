import pytest

from montoggle.actions import ExternalUnavailable, unavailable_message
from montoggle.models import Mode, OutputConfig, Position, Resolution
from montoggle.xrandr import BackendError

from fakes import FakeXrandr, laptop, monitor

R = Resolution.parse


def test_internal_only_plan(docked, make_actions):
    actions = make_actions(docked)
    assert actions.plan(Mode.INTERNAL_ONLY) == [[
        OutputConfig("HDMI1", enabled=False),
        OutputConfig("eDP1", mode=R("2560x1440"), pos=Position(0, 0), primary=True),
    ]]


def test_internal_only_without_external(undocked, make_actions, ui):
    actions = make_actions(undocked)
    assert actions.internal_only()
    assert undocked.calls == [[
        OutputConfig("eDP1", mode=R("2560x1440"), pos=Position(0, 0), primary=True),
    ]]
    assert ui.messages == [Mode.INTERNAL_ONLY.label]


def test_internal_only_override(docked, make_actions):
    steps = make_actions(docked).plan(Mode.INTERNAL_ONLY, R("1600x900"))
    assert steps[0][-1].mode == R("1600x900")


def test_internal_only_is_idempotent(docked, make_actions):
    make_actions(docked).internal_only()
    first_plan = make_actions(docked).plan(Mode.INTERNAL_ONLY)
    listing = docked.query()

    make_actions(docked).internal_only()
    assert make_actions(docked).plan(Mode.INTERNAL_ONLY) == first_plan
    assert docked.query() == listing


def test_external_only(docked, make_actions, ui):
    assert make_actions(docked).external_only()
    assert docked.calls == [[
        OutputConfig("eDP1", enabled=False),
        OutputConfig("HDMI1", mode=R("1920x1080"), pos=Position(0, 0), primary=True),
    ]]
    assert ui.messages == [Mode.EXTERNAL_ONLY.label]


@pytest.mark.parametrize("mode", [
    Mode.EXTERNAL_ONLY,
    Mode.CLONE_TOWARD_INTERNAL,
    Mode.CLONE_TOWARD_EXTERNAL,
    Mode.PRESENTATION,
])
def test_modes_needing_external_are_unavailable(undocked, make_actions, ui, mode):
    actions = make_actions(undocked)
    assert actions.apply(mode) is False
    assert undocked.calls == []
    assert ui.messages == [unavailable_message(mode)]
    assert ui.messages[0].startswith(f"{mode.value}: not available")
    with pytest.raises(ExternalUnavailable):
        actions.plan(mode)


def test_configured_external_that_is_unplugged(docked, make_actions, ui):
    actions = make_actions(docked, external="DP1")
    assert not actions.presentation()
    assert docked.calls == []


def test_clone_toward_internal(docked, make_actions):
    steps = make_actions(docked).plan(Mode.CLONE_TOWARD_INTERNAL)
    assert steps == [
        [OutputConfig("eDP1", mode=R("2560x1440"), pos=Position(0, 0), primary=True)],
        [OutputConfig("HDMI1", mode=R("1920x1080"), pos=Position(0, 0),
                      scale_from=R("2560x1440"))],
    ]


def test_clone_toward_external_stabilizes_internal_first(docked, make_actions):
    steps = make_actions(docked).plan(Mode.CLONE_TOWARD_EXTERNAL)
    assert [step[0].name for step in steps] == ["eDP1", "HDMI1"]
    assert steps[0][0].scale_from == R("1920x1080")
    assert steps[1][0].primary


def test_clone_anchor_override(docked, make_actions):
    steps = make_actions(docked).plan(Mode.CLONE_TOWARD_EXTERNAL, R("1280x720"))
    assert steps[0][0].scale_from == R("1280x720")
    assert steps[1][0].mode == R("1280x720")


def test_presentation_from_internal_only(docked, make_actions, ui):
    assert make_actions(docked).presentation()
    assert docked.calls == [
        [OutputConfig("eDP1", mode=R("2560x1440"), pos=Position(0, 0), primary=True)],
        [OutputConfig("HDMI1", mode=R("1920x1080"), pos=Position(2560, 0))],
    ]
    assert ui.messages == [Mode.PRESENTATION.label]


def test_presentation_turns_active_external_off_first(docked, make_actions):
    make_actions(docked).clone_toward_external()
    docked.calls.clear()

    make_actions(docked).presentation()
    assert docked.calls[0] == [OutputConfig("HDMI1", enabled=False)]
    assert docked.calls[1][0].name == "eDP1"
    assert docked.calls[2][0].name == "HDMI1"
    assert docked.outputs["eDP1"].scale_from is None


def test_presentation_resolution_override(docked, make_actions):
    make_actions(docked).presentation(R("1600x900"))
    hdmi = docked.outputs["HDMI1"]
    assert hdmi.mode == R("1600x900")
    assert hdmi.pos == Position(2560, 0)
    assert docked.outputs["eDP1"].mode == R("2560x1440")


def test_unlisted_override_is_passed_through(docked, make_actions, caplog):
    steps = make_actions(docked).plan(Mode.EXTERNAL_ONLY, R("3840x2160"))
    assert steps[0][1].mode == R("3840x2160")
    assert "does not list 3840x2160" in caplog.text


def test_backend_failure_aborts_remaining_steps(docked, make_actions, ui):
    class FailingBackend(FakeXrandr):
        def apply(self, step):
            super().apply(step)
            raise BackendError("xrandr returned error code 1")

    backend = FailingBackend(laptop(), monitor())
    with pytest.raises(BackendError):
        make_actions(backend).presentation()
    assert len(backend.calls) == 1
    assert ui.messages == []


def test_internal_only_releases_output_unplugged_while_active(docked, make_actions):
    make_actions(docked).presentation()
    docked.outputs["HDMI1"].connected = False
    actions = make_actions(docked)
    assert actions.roles.external is None
    assert actions.query.stale_outputs() == ["HDMI1"]

    assert actions.internal_only()
    assert docked.calls[-1] == [
        OutputConfig("HDMI1", enabled=False),
        OutputConfig("eDP1", mode=R("2560x1440"), pos=Position(0, 0), primary=True),
    ]
    assert make_actions(docked).query.stale_outputs() == []


def test_internal_only_turns_configured_external_off_once(docked, make_actions):
    make_actions(docked).external_only()
    docked.outputs["HDMI1"].connected = False
    steps = make_actions(docked, external="HDMI1").plan(Mode.INTERNAL_ONLY)
    assert [cfg.name for cfg in steps[0]] == ["HDMI1", "eDP1"]
