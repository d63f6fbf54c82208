import random
from dataclasses import replace

import pytest

from games.word_obstacle import state as st
from games.word_obstacle.controller import MENU, RoundController
from word_loader import BUILTIN_LEVELS, WordDefinition

FRAME = 16


class FakeAudio:
    def __init__(self, fail=False):
        self.played = []
        self.music = []
        self.fail = fail

    def play_once(self, name):
        if self.fail:
            raise RuntimeError("no mixer")
        self.played.append(name)

    def start_loop(self, track=None):
        self.music.append("start")

    def stop(self):
        self.music.append("stop")


class FakeReporter:
    def __init__(self, fail=False):
        self.results = []
        self.fail = fail

    def submit(self, result):
        self.results.append(result)
        if self.fail:
            raise ConnectionError("offline")


def run_for(controller, ms, step=FRAME):
    elapsed = 0
    while elapsed < ms:
        dt = min(step, ms - elapsed)
        controller.advance(dt)
        elapsed += dt


@pytest.fixture
def reporter():
    return FakeReporter()


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def controller(audio, reporter):
    return RoundController(
        BUILTIN_LEVELS["expert"].words,
        st.RoundConfig(),
        audio=audio,
        reporter=reporter,
        rng=random.Random(5),
    )


def test_nothing_runs_before_start(controller):
    run_for(controller, 5000)
    assert controller.state.phase == st.INSTRUCTIONS
    assert controller.state.falling_words == ()
    assert controller.active_tasks() == []


def test_start_runs_spawn_motion_and_timer(controller):
    controller.start()
    assert controller.active_tasks() == ["motion", "spawn", "timer"]
    run_for(controller, 1000)
    s = controller.state
    assert s.time_remaining == 59
    assert len(s.used_word_indices) == 1
    assert s.falling_words and s.falling_words[0].y > 0


def test_pause_freezes_time_and_words(controller):
    controller.start()
    run_for(controller, 5000)
    assert controller.state.time_remaining == 55
    controller.pause()
    assert controller.active_tasks() == []
    frozen = controller.state
    run_for(controller, 10000)
    assert controller.state.time_remaining == 55
    assert [w.y for w in controller.state.falling_words if not w.hit] == [
        w.y for w in frozen.falling_words if not w.hit
    ]
    assert controller.state.used_word_indices == frozen.used_word_indices

    controller.resume()
    assert controller.state.phase == st.COUNTDOWN
    assert controller.active_tasks() == ["countdown"]
    run_for(controller, 2000)
    assert controller.state.countdown == 1
    assert controller.state.time_remaining == 55
    run_for(controller, 1000)
    assert controller.state.phase == st.PLAYING
    assert controller.state.time_remaining == 55
    run_for(controller, 1000)
    assert controller.state.time_remaining == 54


def test_round_reports_exactly_once(controller, reporter):
    controller.start()
    run_for(controller, 60000)
    s = controller.state
    assert s.phase == st.OVER
    assert s.time_remaining == 0
    assert controller.active_tasks() == []
    # extra frames, like repeated renders of the game-over screen
    run_for(controller, 5000)
    controller.advance(0)
    assert len(reporter.results) == 1
    result = reporter.results[0]
    assert result.score == s.score
    assert result.level == "expert"
    assert controller.result is result


def test_round_over_stops_spawning(controller):
    controller.start()
    run_for(controller, 60000)
    words = controller.state.falling_words
    used = controller.state.used_word_indices
    run_for(controller, 3000)
    assert controller.state.used_word_indices == used
    assert [w.y for w in controller.state.falling_words] == [
        w.y for w in words if w.id in {x.id for x in controller.state.falling_words}
    ]


def test_play_again_resets_and_reports_again(controller, reporter):
    controller.start()
    run_for(controller, 60000)
    assert controller.play_again()
    s = controller.state
    assert s.phase == st.PLAYING
    assert s.score == 0
    assert s.time_remaining == 60
    assert s.falling_words == ()
    assert s.used_word_indices == frozenset()
    assert controller.result is None
    run_for(controller, 60000)
    assert len(reporter.results) == 2


def test_play_again_only_after_round_over(controller):
    controller.start()
    assert not controller.play_again()


def test_reporter_failure_does_not_break_round(audio):
    reporter = FakeReporter(fail=True)
    c = RoundController(
        BUILTIN_LEVELS["beginner"].words, st.RoundConfig(round_seconds=2), audio=audio, reporter=reporter
    )
    c.start()
    run_for(c, 2000)
    assert c.state.is_over
    assert c.result is not None
    assert len(reporter.results) == 1
    assert c.play_again()


def test_audio_failure_is_swallowed(reporter):
    c = RoundController(
        BUILTIN_LEVELS["expert"].words, audio=FakeAudio(fail=True), reporter=reporter
    )
    assert c.start()
    run_for(c, 3000)
    assert c.state.time_remaining == 57


def test_catching_words_in_lane_scores():
    catalog = (
        WordDefinition("team", True),
        WordDefinition("rope", True),
        WordDefinition("cat", False),
        WordDefinition("dog", False),
    )
    config = st.RoundConfig(lane_count=1, start_lane=0)
    audio = FakeAudio()
    c = RoundController(catalog, config, audio=audio, rng=random.Random(2))
    c.start()
    run_for(c, 10000)
    s = c.state
    caught = s.correct_catches + s.incorrect_catches
    assert caught > 0
    assert s.score >= 0
    assert "correct" in audio.played or "wrong" in audio.played
    # pausing stops motion, so no new hits; pending removals still run
    c.pause()
    c.advance(config.hit_linger_ms)
    assert not any(w.hit for w in c.state.falling_words)


def test_hit_word_removed_after_delay():
    catalog = (WordDefinition("team", True),)
    config = st.RoundConfig(lane_count=1, start_lane=0)
    c = RoundController(catalog, config, rng=random.Random(0))
    c.start()
    # first spawn at 900ms, reaches the band after 22 motion ticks
    for _ in range(5000):
        c.advance(1)
        if c.state.correct_catches:
            break
    assert c.state.correct_catches == 1
    hit = [w for w in c.state.falling_words if w.hit]
    assert len(hit) == 1
    c.advance(299)
    assert any(w.id == hit[0].id for w in c.state.falling_words)
    c.advance(1)
    assert all(w.id != hit[0].id for w in c.state.falling_words)
    assert c.state.feedback
    c.advance(300)
    assert c.state.feedback == ()


def test_lane_change_triggers_collision_check():
    c = RoundController((WordDefinition("team", True),), st.RoundConfig())
    c.start()
    word = st.FallingWord(99, "team", True, lane=2, y=400)
    c.state = replace(c.state, falling_words=(word,))
    assert c.move_right()
    assert c.state.score == 5
    assert c.state.falling_words[0].hit


def test_lane_moves_ignored_while_paused(controller):
    controller.start()
    controller.pause()
    assert not controller.move_left()
    assert controller.state.player_lane == 1


def test_go_home_resets_and_navigates(audio, reporter):
    targets = []
    c = RoundController(
        BUILTIN_LEVELS["expert"].words, audio=audio, reporter=reporter, navigate=targets.append
    )
    c.start()
    run_for(c, 4000)
    c.move_left()
    assert c.go_home() == MENU
    assert targets == [MENU]
    s = c.state
    assert s.phase == st.INSTRUCTIONS
    assert s.score == 0 and s.time_remaining == 60
    assert s.player_lane == 1
    assert c.active_tasks() == []
    assert reporter.results == []


def test_close_cancels_everything(controller, audio):
    with controller:
        controller.start()
        run_for(controller, 2000)
    assert controller.active_tasks() == []
    assert controller.scheduler.pending() == []
    assert audio.music == ["start", "stop"]
    before = controller.state
    run_for(controller, 5000)
    assert controller.state == before
