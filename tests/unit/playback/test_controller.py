import math

import pytest

from looptrainer.playback.controller import LoopController, LoopRange, SeekInstruction
from looptrainer.playback.player import PlayerMetadata, extract_video_id
from looptrainer.server.session.models import SessionRecord


class FakePlayer:
    def __init__(self) -> None:
        self.seeks: list[float] = []
        self.rates: list[float] = []

    def seek_to(self, seconds: float) -> None:
        self.seeks.append(seconds)

    def set_playback_rate(self, rate: float) -> None:
        self.rates.append(rate)


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def controller(player):
    controller = LoopController(player)
    controller.on_duration(200)
    return controller


def _saved_session(**overrides) -> SessionRecord:
    values = dict(
        id=7,
        timestamp=1_700_000_000_000,
        video_id="abc123",
        video_title="Etude No. 3",
        loop_start=12.5,
        loop_end=20.0,
        playback_rate=0.5,
        note="Left hand only",
    )
    values.update(overrides)
    return SessionRecord(**values)


def test_begin_seek_disables_active_loop(controller):
    controller.loop_range = LoopRange(start=10, end=50, enabled=True)

    controller.begin_seek(0.5)

    assert controller.is_seeking is True
    assert controller.loop_range.enabled is False
    assert controller.played_fraction == 0.5
    assert controller.current_seconds == 100


def test_commit_seek_emits_absolute_time(controller, player):
    controller.begin_seek(0.25)

    instruction = controller.commit_seek()

    assert instruction == SeekInstruction(seconds=50.0)
    assert controller.is_seeking is False
    assert player.seeks == [50.0]


def test_progress_past_loop_end_forces_seek_to_start(controller, player):
    controller.loop_range = LoopRange(start=30, end=40, enabled=True)

    instruction = controller.on_external_progress(40.2 / 200, 40.2)

    assert instruction == SeekInstruction(seconds=30, forced=True)
    assert player.seeks == [30]


def test_loop_seek_is_level_triggered(controller, player):
    controller.loop_range = LoopRange(start=30, end=40, enabled=True)

    controller.on_external_progress(0.2, 40.0)
    controller.on_external_progress(0.205, 41.0)

    assert player.seeks == [30, 30]


def test_repeat_loop_seeks_can_be_suppressed(player):
    controller = LoopController(player, suppress_repeat_loop_seeks=True)
    controller.on_duration(200)
    controller.loop_range = LoopRange(start=30, end=40, enabled=True)

    first = controller.on_external_progress(0.2, 40.0)
    second = controller.on_external_progress(0.205, 41.0)
    controller.on_external_progress(0.15, 30.0)
    controller.on_external_progress(0.2, 40.0)

    assert first == second == SeekInstruction(seconds=30, forced=True)
    assert player.seeks == [30, 30]


def test_progress_inside_loop_does_not_seek(controller, player):
    controller.loop_range = LoopRange(start=30, end=40, enabled=True)

    assert controller.on_external_progress(0.175, 35.0) is None
    assert controller.played_fraction == 0.175
    assert player.seeks == []


def test_progress_is_ignored_while_seeking(controller, player):
    controller.begin_seek(0.8)
    controller.loop_range = LoopRange(start=30, end=40, enabled=True)

    assert controller.on_external_progress(0.3, 60.0) is None
    assert controller.played_fraction == 0.8
    assert player.seeks == []


def test_set_start_past_end_snaps_end_to_duration(controller):
    controller.loop_range = LoopRange(start=10, end=50)
    controller.played_fraction = 0.5

    loop = controller.set_loop_boundary_to_current("start")

    assert loop.start == 100
    assert loop.end == 200
    assert loop.enabled is True


def test_set_end_before_start_snaps_start_to_zero(controller):
    controller.loop_range = LoopRange(start=150, end=180)
    controller.played_fraction = 0.5

    loop = controller.set_loop_boundary_to_current("end")

    assert loop.end == 100
    assert loop.start == 0
    assert loop.enabled is True


def test_set_boundary_keeps_valid_range(controller):
    controller.loop_range = LoopRange(start=10, end=150)
    controller.played_fraction = 0.5

    controller.set_loop_boundary_to_current("start")

    assert (controller.loop_range.start, controller.loop_range.end) == (100, 150)


def test_set_unknown_boundary_raises(controller):
    with pytest.raises(ValueError):
        controller.set_loop_boundary_to_current("middle")


def test_first_toggle_builds_non_degenerate_range(controller):
    controller.played_fraction = 0.1

    assert controller.toggle_loop() is True
    assert controller.loop_range.start == 20
    assert controller.loop_range.end == 200
    assert controller.loop_range.end > controller.loop_range.start

    assert controller.toggle_loop() is False
    assert (controller.loop_range.start, controller.loop_range.end) == (20, 200)


def test_toggle_keeps_existing_bounds(controller):
    controller.loop_range = LoopRange(start=5, end=15)

    controller.toggle_loop()

    assert controller.loop_range == LoopRange(start=5, end=15, enabled=True)


@pytest.mark.parametrize(
    "fraction, delta, expected",
    [(0.5, 5, 105), (0.5, -5, 95), (0.01, -5, 0), (0.99, 5, 200)],
)
def test_jump_clamps_to_duration(controller, player, fraction, delta, expected):
    controller.played_fraction = fraction

    instruction = controller.jump(delta)

    assert instruction.seconds == pytest.approx(expected)
    assert controller.current_seconds == pytest.approx(expected)
    assert player.seeks == [instruction.seconds]


def test_jump_helpers_use_five_second_step(controller):
    controller.played_fraction = 0.5

    assert controller.jump_forward().seconds == pytest.approx(105)
    assert controller.jump_back().seconds == pytest.approx(100)


def test_unknown_duration_never_produces_nan(player):
    controller = LoopController(player)

    controller.played_fraction = 0.5
    instruction = controller.jump(10)
    controller.toggle_loop()

    assert instruction.seconds == 0
    assert controller.played_fraction == 0
    assert controller.loop_overlay() == (0.0, 0.0)
    assert controller.position_label == "0:00 / 0:00"
    assert not math.isnan(controller.current_seconds)


def test_non_finite_player_values_are_sanitised(controller):
    controller.on_external_progress(math.nan, math.nan)
    controller.on_duration(math.inf)

    assert controller.played_fraction == 0
    assert controller.duration == 0


def test_seek_to_text(controller, player):
    instruction = controller.seek_to_text("1:40")

    assert instruction == SeekInstruction(seconds=100)
    assert controller.played_fraction == 0.5
    assert controller.seek_to_text("9:00") is None
    assert controller.seek_to_text("later") is None
    assert player.seeks == [100]


def test_loop_boundary_from_text(controller):
    controller.loop_range = LoopRange(start=10, end=50)

    assert controller.set_loop_boundary_from_text("start", "0:12.500") is True
    assert controller.set_loop_boundary_from_text("end", "oops") is False
    assert controller.loop_range.start == 12.5
    assert controller.loop_range.end == 50
    assert controller.loop_labels == ("0:12.500", "0:50.000")


def test_loop_overlay_fractions(controller):
    controller.loop_range = LoopRange(start=50, end=150, enabled=True)

    assert controller.loop_overlay() == (0.25, 0.75)


def test_playback_rate_validation(controller, player):
    assert controller.set_playback_rate(1.5) is True
    assert controller.set_playback_rate(0) is False
    assert controller.set_playback_rate(math.nan) is False
    assert controller.playback_rate == 1.5
    assert player.rates == [1.5]


def test_play_state_transitions(controller):
    controller.on_play()
    assert controller.is_playing is True
    controller.on_pause()
    assert controller.is_playing is False
    assert controller.toggle_play() is True


def test_on_ready_resolves_metadata_and_seeds_session(player):
    controller = LoopController(player, session=_saved_session())
    controller.loop_range.enabled = True

    resolved = controller.on_ready(lambda: PlayerMetadata(title="Etude No. 3 (live)", video_id="abc123"))

    assert resolved is True
    assert controller.video_title == "Etude No. 3 (live)"
    assert controller.video_id == "abc123"
    assert controller.loop_range == LoopRange(start=12.5, end=20.0, enabled=False)
    assert controller.playback_rate == 0.5
    assert controller.video_url == "https://www.youtube.com/watch?v=abc123"


def test_on_ready_survives_metadata_failure(player):
    controller = LoopController(player)

    def broken():
        raise RuntimeError("player not ready")

    assert controller.on_ready(broken) is False
    assert controller.video_id == ""
    assert controller.video_title == ""
    assert controller.video_url is None
    assert controller.loop_range == LoopRange()


def test_build_session_snapshots_state(controller):
    controller.on_ready(lambda: PlayerMetadata(title="Etude", video_id="abc123"))
    controller.loop_range = LoopRange(start=10, end=20, enabled=True)
    controller.set_playback_rate(0.75)

    session = controller.build_session("  Smoother shifts ", timestamp=1_700_000_000_000)

    assert session.id is None
    assert session.note == "Smoother shifts"
    assert (session.loop_start, session.loop_end) == (10, 20)
    assert session.playback_rate == 0.75
    assert session.timestamp == 1_700_000_000_000


@pytest.mark.parametrize(
    "video_id, note, loop",
    [
        ("", "note", LoopRange(start=1, end=2)),
        ("abc123", "  ", LoopRange(start=1, end=2)),
        ("abc123", "note", LoopRange(start=30, end=20)),
    ],
)
def test_build_session_rejects_incomplete_state(controller, video_id, note, loop):
    controller.video_id = video_id
    controller.loop_range = loop

    with pytest.raises(ValueError):
        controller.build_session(note)


def test_loaded_session_round_trips_through_build(player):
    saved = _saved_session()
    controller = LoopController(player, session=saved)

    rebuilt = controller.build_session(saved.note, timestamp=saved.timestamp)

    assert rebuilt == saved.with_id(None)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ?t=42", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://m.youtube.com/watch?v=abc&list=x", "abc"),
        ("https://example.com/watch?v=abc", None),
        ("not a url", None),
    ],
)
def test_extract_video_id(url, expected):
    assert extract_video_id(url) == expected
