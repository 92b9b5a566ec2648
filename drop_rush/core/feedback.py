"""
Feedback Channel
================

Render commands and audio cues emitted by the round core, plus the sink
interface presentation layers implement.

The core never draws or plays anything itself. Sinks are best-effort:
the controller discards any exception a sink raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union


class AudioCue(Enum):
    """Named sound cues."""
    START = "start"
    SUCCESS = "success"
    FAIL = "fail"
    WIN = "win"
    LOSE = "lose"


@dataclass(frozen=True)
class AddDrop:
    """A new drop entered the container."""
    uid: int
    kind: str                    # "good" or "bad"
    size: float
    x: float
    lifetime_ms: int


@dataclass(frozen=True)
class RemoveDrop:
    """
    A drop left the container.

    reason is one of "caught", "penalty", "expired", "cleared". Presentation
    layers may keep a caught/penalty drop on screen for linger_ms to play
    its explode animation.
    """
    uid: int
    reason: str
    linger_ms: int = 0


@dataclass(frozen=True)
class Particle:
    """One piece of a particle burst, relative to the burst origin."""
    offset_x: float
    offset_y: float
    dx: float
    dy: float
    rotation: float
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class ParticleBurst:
    """Burst of particles at (x, y) in container coordinates."""
    x: float
    y: float
    particles: Tuple[Particle, ...]
    lifetime_ms: int


@dataclass(frozen=True)
class ConfettiPiece:
    """A single confetti piece falling from the top of the container."""
    x: float
    color: Tuple[int, int, int]
    lifetime_ms: int


@dataclass(frozen=True)
class Toast:
    """Milestone notification."""
    threshold: int
    message: str
    lifetime_ms: int


@dataclass(frozen=True)
class RoundMessage:
    """End-of-round message panel, or hide it when text is empty."""
    text: str
    fact: str = ""
    actions: Tuple[str, ...] = ()
    won: bool = False

    @property
    def visible(self) -> bool:
        return bool(self.text)


RenderCommand = Union[AddDrop, RemoveDrop, ParticleBurst, ConfettiPiece, Toast, RoundMessage]


class FeedbackSink:
    """
    Collaborator receiving render commands and audio cues.

    The base implementation ignores everything; subclasses override what
    they present.
    """

    def render(self, command: RenderCommand) -> None:
        pass

    def play(self, cue: AudioCue) -> None:
        pass


class NullFeedback(FeedbackSink):
    """Sink that drops everything (headless simulation)."""


class RecordingFeedback(FeedbackSink):
    """Sink that records everything it receives, in order."""

    def __init__(self):
        self.commands: List[RenderCommand] = []
        self.cues: List[AudioCue] = []

    def render(self, command: RenderCommand) -> None:
        self.commands.append(command)

    def play(self, cue: AudioCue) -> None:
        self.cues.append(cue)

    def of_type(self, command_type) -> List[RenderCommand]:
        """Recorded commands of a given type."""
        return [c for c in self.commands if isinstance(c, command_type)]

    def clear(self) -> None:
        self.commands.clear()
        self.cues.clear()


class FeedbackFanout(FeedbackSink):
    """Forwards to several sinks; one failing sink does not starve the rest."""

    def __init__(self, *sinks: FeedbackSink):
        self._sinks = list(sinks)

    def add(self, sink: FeedbackSink) -> None:
        self._sinks.append(sink)

    def render(self, command: RenderCommand) -> None:
        for sink in self._sinks:
            try:
                sink.render(command)
            except Exception:
                pass

    def play(self, cue: AudioCue) -> None:
        for sink in self._sinks:
            try:
                sink.play(cue)
            except Exception:
                pass
