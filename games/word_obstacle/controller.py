"""Round controller: runs the pure transitions on a TickScheduler.

The controller holds the current RoundState, the handles of every running
task, and the collaborators (audio, reporter, navigation). After each
transition _sync_tasks() starts the periodic tasks the new phase needs and
cancels the rest.
"""

import logging
import random

from . import state as st
from .scheduler import TickScheduler

log = logging.getLogger(__name__)

MENU = "menu"


class RoundController:
    def __init__(
        self,
        catalog,
        config=None,
        audio=None,
        reporter=None,
        navigate=None,
        rng=None,
        scheduler=None,
    ):
        self.catalog = tuple(catalog)
        self.config = config or st.RoundConfig()
        self.audio = audio
        self.reporter = reporter
        self.navigate = navigate
        self.rng = rng or random.Random()
        self.scheduler = scheduler or TickScheduler()
        self.state = st.new_round(self.config)
        self.result = None
        # periodic task name -> handle
        self._tasks = {}
        # delayed one-shot removals, cleared on reset
        self._pending = []

    # -- collaborators --
    def _sound(self, name):
        if self.audio is None:
            return
        try:
            self.audio.play_once(name)
        except Exception as e:
            log.warning("Sound %s failed: %s", name, e)

    def _music(self, on):
        if self.audio is None:
            return
        try:
            if on:
                self.audio.start_loop()
            else:
                self.audio.stop()
        except Exception as e:
            log.warning("Music control failed: %s", e)

    def _report(self):
        self.state, result = st.take_report(self.state, self.config)
        if result is None:
            return
        self.result = result
        log.info(
            "Round over: score=%s correct=%s wrong=%s (%s)",
            result.score,
            result.correct_catches,
            result.incorrect_catches,
            result.outcome,
        )
        self._sound("over")
        if self.reporter is None:
            return
        try:
            self.reporter.submit(result)
        except Exception as e:
            log.error("Reporting score failed: %s", e)

    # -- task bookkeeping --
    def _wanted_tasks(self):
        c = self.config
        if self.state.phase == st.PLAYING:
            return {
                "spawn": (c.spawn_interval_ms, self._on_spawn),
                "motion": (c.motion_interval_ms, self._on_motion),
                "timer": (c.timer_interval_ms, self._on_timer),
            }
        if self.state.phase == st.COUNTDOWN:
            return {"countdown": (c.countdown_interval_ms, self._on_countdown)}
        return {}

    def _sync_tasks(self):
        wanted = self._wanted_tasks()
        for name in list(self._tasks):
            if name not in wanted:
                self.scheduler.cancel(self._tasks.pop(name))
        for name, (interval, callback) in wanted.items():
            if name not in self._tasks:
                self._tasks[name] = self.scheduler.every(interval, callback, name=name)
        if self.state.is_over:
            self._report()

    def _cancel_pending(self):
        for h in self._pending:
            self.scheduler.cancel(h)
        self._pending = []

    def active_tasks(self):
        return sorted(self._tasks)

    def _set(self, new_state):
        changed = new_state is not self.state
        self.state = new_state
        if changed:
            self._sync_tasks()
        return changed

    def _apply(self, effects):
        for e in effects:
            if e.kind == st.SOUND:
                self._sound(e.value)
            elif e.kind == st.REMOVE_WORD:
                self._later(e.delay_ms, st.remove_word, e.value)
            elif e.kind == st.EXPIRE_FEEDBACK:
                self._later(e.delay_ms, st.expire_feedback, e.value)

    def _later(self, delay_ms, transition, ident):
        def fire():
            self.state = transition(self.state, ident)

        self._pending = [h for h in self._pending if not h.cancelled]
        self._pending.append(self.scheduler.after(delay_ms, fire, name=transition.__name__))

    def _collide(self):
        self.state, effects = st.detect_collisions(self.state, self.config)
        self._apply(effects)

    # -- periodic callbacks --
    def _on_spawn(self):
        self.state = st.spawn_tick(self.state, self.catalog, self.config, self.rng)

    def _on_motion(self):
        self.state = st.motion_tick(self.state, self.config)
        self._collide()

    def _on_timer(self):
        self._set(st.timer_tick(self.state))

    def _on_countdown(self):
        self._set(st.countdown_tick(self.state))

    # -- player actions --
    def start(self):
        if self.state.phase != st.INSTRUCTIONS:
            return False
        self._sound("tap")
        self._cancel_pending()
        return self._set(st.start(self.state, self.config))

    def pause(self):
        if self.state.phase == st.PLAYING:
            self._sound("tap")
        return self._set(st.pause(self.state))

    def resume(self):
        if self.state.phase == st.PAUSED:
            self._sound("tap")
        return self._set(st.resume(self.state, self.config))

    def move(self, delta):
        if not self._set(st.move_lane(self.state, delta, self.config)):
            return False
        self._sound("tap")
        self._collide()
        return True

    def move_left(self):
        return self.move(-1)

    def move_right(self):
        return self.move(1)

    def play_again(self):
        if self.state.phase != st.OVER:
            return False
        self._sound("tap")
        self._cancel_pending()
        self.result = None
        return self._set(st.play_again(self.state, self.config))

    def go_home(self):
        self._sound("tap")
        self._cancel_pending()
        self.result = None
        self._set(st.go_home(self.state, self.config))
        if self.navigate is not None:
            try:
                self.navigate(MENU)
            except Exception as e:
                log.error("Navigation to %s failed: %s", MENU, e)
        return MENU

    # -- frame driving --
    def advance(self, dt_ms):
        self.scheduler.advance(dt_ms)
        if self.state.is_over:
            # guarded by RoundState.reported
            self._report()

    def open(self):
        self._music(True)

    def close(self):
        """Cancel every task; called on every way out of the game screen."""
        self._cancel_pending()
        for h in self._tasks.values():
            self.scheduler.cancel(h)
        self._tasks = {}
        self.scheduler.cancel_all()
        self._music(False)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()
        return False
