"""
Round Controller
================

Main round orchestrator combining the countdown, spawner, scoring,
milestones and end-of-round rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from drop_rush.core.config_loader import GameConfig, RoundConfig, get_config
from drop_rush.core.difficulty_table import DifficultyTable
from drop_rush.core.drop import Drop
from drop_rush.core.effects import EffectFactory
from drop_rush.core.feedback import (
    AddDrop,
    AudioCue,
    FeedbackSink,
    NullFeedback,
    RemoveDrop,
    RenderCommand,
    RoundMessage,
    Toast,
)
from drop_rush.core.milestones import MilestoneNotifier
from drop_rush.core.rng import GameRng
from drop_rush.core.rules import EndOfRoundResolver, RoundResult
from drop_rush.core.scheduler import Scheduler, TimerHandle
from drop_rush.core.scoring import ScoreEvent, ScoreTracker
from drop_rush.core.spawner import Spawner
from drop_rush.core.state_snapshot import RoundSnapshot, SnapshotBuilder

COUNTDOWN_INTERVAL_MS = 1000


class Phase(Enum):
    """Round lifecycle: IDLE -> RUNNING -> ENDED -> IDLE."""
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


@dataclass(frozen=True)
class RoundState:
    """Read-only view of the controller's round state."""
    phase: Phase
    score: int
    time_left: int
    shown_milestones: FrozenSet[int]
    generation: int
    live_drops: int

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING


class RoundController:
    """
    Round state machine.

    Orchestrates:
    - Countdown timer (one tick per second)
    - Spawner timer (one drop per spawn interval)
    - Per-drop expiry timers
    - Scoring, milestones and end-of-round resolution
    - Render commands and audio cues for the presentation layer

    Every timer callback is bound to the round generation that scheduled
    it. Callbacks from an older generation, or arriving outside RUNNING,
    do nothing. Invalid transitions are no-ops.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        difficulty: Optional[str] = None,
        seed: Optional[int] = None,
        feedback: Optional[FeedbackSink] = None,
        scheduler: Optional[Scheduler] = None,
        debug: bool = False
    ):
        """
        Initialize controller in the IDLE phase.

        Args:
            config: Game configuration. Uses default if None.
            difficulty: Difficulty preset name. Uses config default if None.
            seed: Random seed for reproducibility.
            feedback: Render/audio collaborator. Discards everything if None.
            scheduler: Timer queue. A fresh virtual clock if None.
            debug: Print [DEBUG] lines for transitions.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._debug = debug
        self._table = DifficultyTable(config)
        self._round_config: RoundConfig = self._table.get(difficulty)

        # Initialize subsystems
        self._rng = GameRng(seed)
        self._scheduler = scheduler if scheduler is not None else Scheduler()
        self._feedback = feedback if feedback is not None else NullFeedback()
        self._spawner = Spawner(config, self._rng)
        self._scorer = ScoreTracker()
        self._milestones = MilestoneNotifier(config=config)
        self._resolver = EndOfRoundResolver(config, self._rng)
        self._effects = EffectFactory(config, self._rng)
        self._snapshot_builder = SnapshotBuilder(config)
        self._container_height = float(config.spawner.container_height)

        # Round state
        self._phase = Phase.IDLE
        self._time_left: int = self._round_config.duration_seconds
        self._generation: int = 0
        self._drops: Dict[int, Drop] = {}
        self._countdown: Optional[TimerHandle] = None
        self._spawn_timer: Optional[TimerHandle] = None
        self._last_result: Optional[RoundResult] = None

        if self._debug:
            print(f"[DEBUG] RoundController initialized")
            print(f"[DEBUG]   Difficulty: {self._round_config.name}")
            print(f"[DEBUG]   Seed: {seed}")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def round_config(self) -> RoundConfig:
        """Active difficulty preset."""
        return self._round_config

    @property
    def difficulty(self) -> str:
        return self._round_config.name

    @property
    def difficulties(self) -> DifficultyTable:
        return self._table

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is Phase.RUNNING

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def time_left(self) -> int:
        """Seconds left in the round."""
        return self._time_left

    @property
    def target_score(self) -> int:
        return self._round_config.target_score

    @property
    def generation(self) -> int:
        """Incremented on every start and reset."""
        return self._generation

    @property
    def live_drops(self) -> List[Drop]:
        """Unresolved drops, oldest first."""
        return sorted(self._drops.values(), key=lambda d: d.uid)

    @property
    def shown_milestones(self) -> FrozenSet[int]:
        return self._milestones.shown

    @property
    def last_result(self) -> Optional[RoundResult]:
        """Result of the last ended round, cleared on reset/start."""
        return self._last_result

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def now_ms(self) -> int:
        return self._scheduler.now_ms

    @property
    def resolver(self) -> EndOfRoundResolver:
        return self._resolver

    @property
    def container_width(self) -> float:
        return self._spawner.container_width

    @container_width.setter
    def container_width(self, value: float) -> None:
        self._spawner.container_width = value

    @property
    def container_height(self) -> float:
        return self._container_height

    @container_height.setter
    def container_height(self, value: float) -> None:
        self._container_height = max(0.0, float(value))

    @property
    def state(self) -> RoundState:
        """Immutable view of the current round state."""
        return RoundState(
            phase=self._phase,
            score=self._scorer.score,
            time_left=self._time_left,
            shown_milestones=self._milestones.shown,
            generation=self._generation,
            live_drops=len(self._drops)
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Start a round. Valid only from IDLE.

        Returns:
            True if the round started.
        """
        if self._phase is not Phase.IDLE:
            if self._debug:
                print(f"[DEBUG] start() ignored in phase {self._phase.value}")
            return False

        self._generation += 1
        generation = self._generation

        self._scorer.reset()
        self._spawner.reset()
        self._milestones.reset()
        self._time_left = self._round_config.duration_seconds
        self._last_result = None
        self._phase = Phase.RUNNING

        self._countdown = self._scheduler.call_every(
            COUNTDOWN_INTERVAL_MS,
            lambda: self._on_countdown(generation)
        )
        self._spawn_timer = self._scheduler.call_every(
            self._round_config.spawn_interval_ms,
            lambda: self._on_spawn(generation)
        )

        self._emit(RoundMessage(""))
        self._cue(AudioCue.START)

        if self._debug:
            print(f"[DEBUG] Round {generation} started: difficulty={self.difficulty}, "
                  f"target={self.target_score}, time={self._time_left}s")
        return True

    def tick(self) -> bool:
        """
        Count down one second. Ends the round when time runs out.

        Returns:
            True if the tick was applied (round was running).
        """
        if self._phase is not Phase.RUNNING:
            return False

        self._time_left = max(0, self._time_left - 1)
        if self._time_left <= 0:
            self.end()
        return True

    def end(self) -> Optional[RoundResult]:
        """
        End the running round and resolve win/lose.

        Returns:
            RoundResult, or None if no round was running.
        """
        if self._phase is not Phase.RUNNING:
            return None

        self._stop_timers()
        self._clear_drops()
        self._phase = Phase.ENDED

        result = self._resolver.resolve(
            self._scorer.score,
            self._round_config,
            caught=self._scorer.caught,
            penalized=self._scorer.penalized,
            expired=self._scorer.expired
        )
        self._last_result = result

        self._emit(RoundMessage(
            text=result.message,
            fact=result.fact,
            actions=result.actions,
            won=result.won
        ))
        if result.won:
            for piece in self._effects.confetti(self._spawner.container_width):
                self._emit(piece)
            self._cue(AudioCue.WIN)
        else:
            self._cue(AudioCue.LOSE)

        if self._debug:
            outcome = "WIN" if result.won else "LOSS"
            print(f"[DEBUG] Round {self._generation} ended: {outcome} "
                  f"score={result.score}/{result.target_score}")
        return result

    def reset(self) -> bool:
        """
        Stop everything and return to IDLE with fresh round values.
        No-op while already IDLE.

        Returns:
            True if a running or ended round was reset.
        """
        if self._phase is Phase.IDLE:
            return False

        self._stop_timers()
        self._clear_drops()
        self._generation += 1
        self._phase = Phase.IDLE
        self._scorer.reset()
        self._spawner.reset()
        self._milestones.reset()
        self._time_left = self._round_config.duration_seconds
        self._last_result = None
        self._emit(RoundMessage(""))

        if self._debug:
            print(f"[DEBUG] Round reset")
        return True

    def play_again(self) -> bool:
        """Reset immediately followed by start."""
        self.reset()
        return self.start()

    def set_difficulty(self, name: str) -> bool:
        """
        Select a difficulty preset. Rejected while a round is running.

        Args:
            name: Preset name; unknown names select the default preset.

        Returns:
            True if the difficulty was applied.
        """
        if self._phase is Phase.RUNNING:
            if self._debug:
                print(f"[DEBUG] set_difficulty({name!r}) rejected while running")
            return False

        self._round_config = self._table.get(name)
        self._time_left = self._round_config.duration_seconds
        return True

    def advance(self, ms: int) -> int:
        """Advance the round clock. Returns number of timer callbacks fired."""
        return self._scheduler.advance(ms)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def click(self, drop_uid: int) -> Optional[ScoreEvent]:
        """
        Resolve a drop by click. The first click wins; later clicks,
        unknown drops and clicks outside a running round do nothing.

        Args:
            drop_uid: UID of the clicked drop.

        Returns:
            ScoreEvent for the applied change, or None.
        """
        if self._phase is not Phase.RUNNING:
            return None

        drop = self._drops.get(drop_uid)
        if drop is None or drop.generation != self._generation:
            return None
        if not drop.resolve():
            return None
        del self._drops[drop_uid]

        linger = self._config.effects.explode_ms
        now = self._scheduler.now_ms

        if drop.is_bad:
            event = self._scorer.apply_penalty(drop.uid)
            self._emit(RemoveDrop(drop.uid, "penalty", linger_ms=linger))
            self._cue(AudioCue.FAIL)
            # Milestones are only re-checked when the score goes up
            return event

        event = self._scorer.apply_catch(drop.uid)
        cx, cy = drop.center(now, self._container_height)
        self._emit(self._effects.particle_burst(cx, cy))
        self._emit(RemoveDrop(drop.uid, "caught", linger_ms=linger))
        self._cue(AudioCue.SUCCESS)

        for milestone in self._milestones.check(self._scorer.score):
            self._emit(Toast(
                threshold=milestone.threshold,
                message=milestone.message,
                lifetime_ms=self._config.effects.toast_lifetime_ms
            ))
        return event

    def drop_at(self, x: float, y: float) -> Optional[Drop]:
        """Topmost (newest) live drop under the point, or None."""
        now = self._scheduler.now_ms
        for drop in sorted(self._drops.values(), key=lambda d: d.uid, reverse=True):
            if drop.contains(x, y, now, self._container_height):
                return drop
        return None

    def click_at(self, x: float, y: float) -> Optional[ScoreEvent]:
        """Click at container coordinates."""
        drop = self.drop_at(x, y)
        if drop is None:
            return None
        return self.click(drop.uid)

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def _on_countdown(self, generation: int) -> None:
        if generation != self._generation:
            return
        self.tick()

    def _on_spawn(self, generation: int) -> None:
        if generation != self._generation or self._phase is not Phase.RUNNING:
            return

        drop = self._spawner.spawn(self._round_config, self._scheduler.now_ms, generation)
        uid = drop.uid
        drop.expiry = self._scheduler.call_later(
            drop.lifetime_ms,
            lambda: self._on_expire(uid, generation)
        )
        self._drops[uid] = drop
        self._emit(AddDrop(
            uid=uid,
            kind=drop.kind,
            size=drop.size,
            x=drop.x,
            lifetime_ms=drop.lifetime_ms
        ))

    def _on_expire(self, uid: int, generation: int) -> None:
        if generation != self._generation:
            return
        drop = self._drops.pop(uid, None)
        if drop is None or not drop.resolve():
            return
        self._scorer.record_expired()
        self._emit(RemoveDrop(uid, "expired"))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _stop_timers(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        if self._spawn_timer is not None:
            self._spawn_timer.cancel()
            self._spawn_timer = None

    def _clear_drops(self) -> None:
        for drop in self.live_drops:
            if drop.expiry is not None:
                drop.expiry.cancel()
            self._emit(RemoveDrop(drop.uid, "cleared"))
        self._drops.clear()

    def _emit(self, command: RenderCommand) -> None:
        """Send a render command; presentation failures never reach round logic."""
        try:
            self._feedback.render(command)
        except Exception:
            pass

    def _cue(self, cue: AudioCue) -> None:
        try:
            self._feedback.play(cue)
        except Exception:
            pass

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def snapshot(self) -> RoundSnapshot:
        """Build current round snapshot."""
        return self._snapshot_builder.build(
            drops=self._drops.values(),
            now_ms=self._scheduler.now_ms,
            phase=self._phase.value,
            score=self._scorer.score,
            time_left=self._time_left,
            target_score=self._round_config.target_score,
            container_width=self._spawner.container_width,
            container_height=self._container_height
        )

    def get_info(self) -> Dict[str, Any]:
        """Summary dict for tools and debugging."""
        return {
            "phase": self._phase.value,
            "difficulty": self.difficulty,
            "score": self._scorer.score,
            "time_left": self._time_left,
            "target_score": self.target_score,
            "caught": self._scorer.caught,
            "penalized": self._scorer.penalized,
            "expired": self._scorer.expired,
            "spawned": self._spawner.spawned,
            "live_drops": len(self._drops),
            "generation": self._generation,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with HUD values and drop positions.
        """
        now = self._scheduler.now_ms
        drops_data = []
        for drop in self.live_drops:
            drops_data.append({
                "uid": drop.uid,
                "kind": drop.kind,
                "x": drop.x,
                "y": drop.y(now, self._container_height),
                "size": drop.size,
                "progress": drop.progress(now),
            })

        result = self._last_result
        return {
            "container_width": self._spawner.container_width,
            "container_height": self._container_height,
            "phase": self._phase.value,
            "difficulty": self.difficulty,
            "score": self._scorer.score,
            "time_left": self._time_left,
            "target_score": self.target_score,
            "drops": drops_data,
            "message": result.message if result else "",
            "fact": result.fact if result else "",
            "won": bool(result and result.won),
        }
