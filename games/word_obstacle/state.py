"""Round state and the pure transition functions of the Word Obstacle game.

Every transition takes a RoundState and returns a new one. Transitions that
need the outside world to do something (play a sound, remove a word later,
report a score) also return a list of Effect values for the controller to
dispatch. Requests that do not apply in the current phase return the state
unchanged.
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Tuple

INSTRUCTIONS = "instructions"
PLAYING = "playing"
PAUSED = "paused"
COUNTDOWN = "countdown"
OVER = "over"

# effect kinds
SOUND = "sound"
REMOVE_WORD = "remove_word"
EXPIRE_FEEDBACK = "expire_feedback"

CORRECT_COLOR = (80, 220, 120)
WRONG_COLOR = (255, 80, 80)


@dataclass(frozen=True)
class RoundConfig:
    lane_count: int = 3
    round_seconds: int = 60
    spawn_interval_ms: int = 900
    motion_interval_ms: int = 70
    timer_interval_ms: int = 1000
    countdown_interval_ms: int = 1000
    fall_step: int = 16
    # words at or below visible_height have left the play area
    visible_height: int = 450
    trigger_top: int = 350
    reward: int = 5
    hit_linger_ms: int = 300
    feedback_ms: int = 600
    countdown_from: int = 3
    start_lane: int = 1
    practice_ratio: float = 0.5
    level: str = "expert"

    @classmethod
    def from_settings(cls, settings, level=None):
        """Build a config from a Settings object (missing fields keep defaults)."""
        base = cls()
        if settings is None:
            return base if level is None else replace(base, level=level)
        lane_count = max(2, int(getattr(settings, "lane_count", base.lane_count)))
        return replace(
            base,
            lane_count=lane_count,
            round_seconds=max(1, int(getattr(settings, "round_seconds", base.round_seconds))),
            practice_ratio=float(getattr(settings, "practice_ratio", base.practice_ratio)),
            start_lane=min(lane_count // 2, lane_count - 1),
            level=level or getattr(settings, "level", base.level),
        )


@dataclass(frozen=True)
class FallingWord:
    id: int
    text: str
    is_correct: bool
    lane: int
    y: int = 0
    hit: bool = False


@dataclass(frozen=True)
class FloatingFeedback:
    id: int
    text: str
    color: Tuple[int, int, int]
    lane: int
    y: int


@dataclass(frozen=True)
class Effect:
    kind: str
    value: object = None
    delay_ms: int = 0


@dataclass(frozen=True)
class RoundResult:
    score: int
    level: str
    correct_catches: int
    incorrect_catches: int
    outcome: str
    message: str


@dataclass(frozen=True)
class RoundState:
    phase: str = INSTRUCTIONS
    score: int = 0
    time_remaining: int = 60
    player_lane: int = 1
    correct_catches: int = 0
    incorrect_catches: int = 0
    used_word_indices: FrozenSet[int] = frozenset()
    falling_words: Tuple[FallingWord, ...] = ()
    feedback: Tuple[FloatingFeedback, ...] = ()
    countdown: Optional[int] = None
    completed: bool = False
    reported: bool = False
    next_id: int = field(default=1)

    @property
    def is_paused(self):
        return self.phase in (PAUSED, COUNTDOWN)

    @property
    def is_over(self):
        return self.phase == OVER


def new_round(config: RoundConfig) -> RoundState:
    return RoundState(
        time_remaining=config.round_seconds, player_lane=config.start_lane
    )


def _reset(state: RoundState, config: RoundConfig, phase: str) -> RoundState:
    return replace(
        state,
        phase=phase,
        score=0,
        time_remaining=config.round_seconds,
        correct_catches=0,
        incorrect_catches=0,
        used_word_indices=frozenset(),
        falling_words=(),
        feedback=(),
        countdown=None,
        completed=False,
        reported=False,
    )


# -- state machine --
def start(state: RoundState, config: RoundConfig) -> RoundState:
    if state.phase != INSTRUCTIONS:
        return state
    return _reset(state, config, PLAYING)


def pause(state: RoundState) -> RoundState:
    if state.phase != PLAYING:
        return state
    return replace(state, phase=PAUSED)


def resume(state: RoundState, config: RoundConfig) -> RoundState:
    if state.phase != PAUSED:
        return state
    return replace(state, phase=COUNTDOWN, countdown=config.countdown_from)


def countdown_tick(state: RoundState) -> RoundState:
    if state.phase != COUNTDOWN:
        return state
    remaining = (state.countdown or 1) - 1
    if remaining <= 0:
        return replace(state, phase=PLAYING, countdown=None)
    return replace(state, countdown=remaining)


def move_lane(state: RoundState, delta: int, config: RoundConfig) -> RoundState:
    if state.phase != PLAYING:
        return state
    lane = max(0, min(config.lane_count - 1, state.player_lane + delta))
    if lane == state.player_lane:
        return state
    return replace(state, player_lane=lane)


def play_again(state: RoundState, config: RoundConfig) -> RoundState:
    if state.phase != OVER:
        return state
    return _reset(state, config, PLAYING)


def go_home(state: RoundState, config: RoundConfig) -> RoundState:
    return replace(_reset(state, config, INSTRUCTIONS), player_lane=config.start_lane)


# -- periodic updates --
def spawn_tick(state: RoundState, catalog, config: RoundConfig, rng) -> RoundState:
    """Drop one unused catalog word into a random lane.

    When every word has been used the used set is cleared and nothing
    spawns on this tick.
    """
    if state.phase != PLAYING or not catalog:
        return state
    available = [i for i in range(len(catalog)) if i not in state.used_word_indices]
    if not available:
        return replace(state, used_word_indices=frozenset())
    index = rng.choice(available)
    word = catalog[index]
    falling = FallingWord(
        id=state.next_id,
        text=word.text,
        is_correct=word.is_correct,
        lane=rng.randrange(config.lane_count),
    )
    return replace(
        state,
        used_word_indices=state.used_word_indices | {index},
        falling_words=state.falling_words + (falling,),
        next_id=state.next_id + 1,
    )


def motion_tick(state: RoundState, config: RoundConfig) -> RoundState:
    if state.phase != PLAYING:
        return state
    moved = tuple(
        replace(w, y=w.y + config.fall_step)
        for w in state.falling_words
        if w.y + config.fall_step < config.visible_height
    )
    return replace(state, falling_words=moved)


def detect_collisions(
    state: RoundState, config: RoundConfig
) -> Tuple[RoundState, List[Effect]]:
    """Score every unhit word inside the trigger band of the player's lane."""
    if state.phase != PLAYING:
        return state, []
    effects = []
    words = []
    feedback = list(state.feedback)
    score = state.score
    correct = state.correct_catches
    incorrect = state.incorrect_catches
    next_id = state.next_id
    for w in state.falling_words:
        if w.hit or w.lane != state.player_lane or w.y <= config.trigger_top:
            words.append(w)
            continue
        if w.is_correct:
            score += config.reward
            correct += 1
            text, color, sound = f"+{config.reward}", CORRECT_COLOR, "correct"
        else:
            score = max(0, score - config.reward)
            incorrect += 1
            text, color, sound = f"-{config.reward}", WRONG_COLOR, "wrong"
        words.append(replace(w, hit=True))
        note = FloatingFeedback(next_id, text, color, w.lane, w.y)
        next_id += 1
        feedback.append(note)
        effects.append(Effect(SOUND, sound))
        effects.append(Effect(REMOVE_WORD, w.id, config.hit_linger_ms))
        effects.append(Effect(EXPIRE_FEEDBACK, note.id, config.feedback_ms))
    if not effects:
        return state, []
    new_state = replace(
        state,
        score=score,
        correct_catches=correct,
        incorrect_catches=incorrect,
        falling_words=tuple(words),
        feedback=tuple(feedback),
        next_id=next_id,
    )
    return new_state, effects


def remove_word(state: RoundState, word_id: int) -> RoundState:
    words = tuple(w for w in state.falling_words if w.id != word_id)
    if len(words) == len(state.falling_words):
        return state
    return replace(state, falling_words=words)


def expire_feedback(state: RoundState, feedback_id: int) -> RoundState:
    notes = tuple(f for f in state.feedback if f.id != feedback_id)
    if len(notes) == len(state.feedback):
        return state
    return replace(state, feedback=notes)


def timer_tick(state: RoundState) -> RoundState:
    if state.phase != PLAYING:
        return state
    remaining = state.time_remaining - 1
    if remaining <= 0:
        return replace(state, time_remaining=0, phase=OVER, completed=True)
    return replace(state, time_remaining=remaining)


# -- results --
def practice_outcome(correct: int, incorrect: int, ratio: float = 0.5):
    """Return (outcome, message) for the end-of-round screen."""
    if incorrect > correct * ratio:
        return "needs_practice", "Needs more practice with these vowel sounds!"
    return "excellent", "Excellent! Great recognition of the vowel sounds!"


def take_report(
    state: RoundState, config: RoundConfig
) -> Tuple[RoundState, Optional[RoundResult]]:
    """Hand out the round result once per completed round."""
    if state.phase != OVER or not state.completed or state.reported:
        return state, None
    outcome, message = practice_outcome(
        state.correct_catches, state.incorrect_catches, config.practice_ratio
    )
    result = RoundResult(
        score=state.score,
        level=config.level,
        correct_catches=state.correct_catches,
        incorrect_catches=state.incorrect_catches,
        outcome=outcome,
        message=message,
    )
    return replace(state, reported=True), result
