"""
Audio Backend
=============

Short synthesized sound cues played through pygame.mixer.

Each cue is a couple of layered tones with a fast exponential attack and
decay, rendered once with numpy. A cue can be replaced by an external clip
file via the ``audio.clips`` config section. Any failure (no audio device,
missing clip, mixer error) leaves the cue silent.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from drop_rush.core.config_loader import GameConfig, get_config
from drop_rush.core.feedback import AudioCue, FeedbackSink


@dataclass(frozen=True)
class Tone:
    """One layer of a cue."""
    freq: float
    wave: str                # "sine", "triangle", "sawtooth" or "square"
    duration: float          # seconds
    gain: float
    delay: float = 0.0       # seconds after cue start


# Layered tones per cue
CUE_TONES: Dict[AudioCue, Tuple[Tone, ...]] = {
    AudioCue.START: (
        Tone(440, "sine", 0.12, 0.08),
        Tone(660, "sine", 0.09, 0.06, delay=0.08),
    ),
    AudioCue.SUCCESS: (
        Tone(1000, "sine", 0.12, 0.09),
        Tone(1400, "triangle", 0.08, 0.06, delay=0.03),
    ),
    AudioCue.FAIL: (
        Tone(220, "sawtooth", 0.18, 0.12),
        Tone(160, "sine", 0.14, 0.08, delay=0.05),
    ),
    AudioCue.WIN: (
        Tone(880, "triangle", 0.18, 0.12),
        Tone(660, "sine", 0.12, 0.08, delay=0.09),
    ),
    AudioCue.LOSE: (
        Tone(200, "sawtooth", 0.2, 0.12),
    ),
}

_ATTACK_SECONDS = 0.01
_TAIL_SECONDS = 0.02
_FLOOR = 0.0001


def _waveform(wave: str, phase: np.ndarray) -> np.ndarray:
    """Periodic waveform in [-1, 1] for phase measured in cycles."""
    frac = phase - np.floor(phase)
    if wave == "sine":
        return np.sin(2 * np.pi * phase)
    if wave == "triangle":
        return 4 * np.abs(frac - 0.5) - 1
    if wave == "sawtooth":
        return 2 * frac - 1
    if wave == "square":
        return np.where(frac < 0.5, 1.0, -1.0)
    raise ValueError(f"Unknown waveform '{wave}'")


def synthesize_tone(tone: Tone, sample_rate: int) -> np.ndarray:
    """
    Render a single tone to float32 samples in [-1, 1].

    The envelope ramps exponentially from near-silence to ``gain`` over the
    attack, then back down by ``duration``; a short silent tail follows.

    Returns:
        (N,) float32 array, N = (duration + tail) * sample_rate.
    """
    total = tone.duration + _TAIL_SECONDS
    n = max(1, int(round(total * sample_rate)))
    t = np.arange(n, dtype=np.float64) / sample_rate

    envelope = np.empty(n, dtype=np.float64)
    attack = t < _ATTACK_SECONDS
    decay = (~attack) & (t < tone.duration)
    envelope[attack] = _FLOOR * (tone.gain / _FLOOR) ** (t[attack] / _ATTACK_SECONDS)
    decay_len = max(tone.duration - _ATTACK_SECONDS, 1e-6)
    envelope[decay] = tone.gain * (_FLOOR / tone.gain) ** ((t[decay] - _ATTACK_SECONDS) / decay_len)
    envelope[~(attack | decay)] = 0.0

    samples = _waveform(tone.wave, tone.freq * t) * envelope
    return samples.astype(np.float32)


def mix_tones(tones: Sequence[Tone], sample_rate: int, channels: int = 2) -> np.ndarray:
    """
    Mix delayed tone layers into one int16 buffer matching the mixer layout.

    Args:
        tones: Layers to mix.
        sample_rate: Samples per second.
        channels: Mixer channel count. 1 gives a mono buffer.

    Returns:
        (N,) int16 array for mono, else (N, channels), ready for
        pygame.sndarray.make_sound.
    """
    if channels < 1:
        raise ValueError(f"channels must be at least 1, got {channels}")

    layers = []
    length = 1
    for tone in tones:
        offset = int(round(tone.delay * sample_rate))
        samples = synthesize_tone(tone, sample_rate)
        layers.append((offset, samples))
        length = max(length, offset + len(samples))

    mono = np.zeros(length, dtype=np.float32)
    for offset, samples in layers:
        mono[offset:offset + len(samples)] += samples

    mono = np.clip(mono, -1.0, 1.0)
    pcm = (mono * 32767).astype(np.int16)
    if channels == 1:
        return pcm
    return np.repeat(pcm[:, np.newaxis], channels, axis=1)


class PygameAudio(FeedbackSink):
    """
    Audio collaborator backed by pygame.mixer.

    Only handles cues; render commands are ignored.
    """

    def __init__(self, config: Optional[GameConfig] = None, muted: bool = False):
        """
        Initialize mixer and build cue sounds.

        Args:
            config: Game configuration. Uses default if None.
            muted: Start muted.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._muted = muted
        self._volume = max(0.0, min(1.0, config.audio.volume))
        self._sounds: Dict[AudioCue, object] = {}
        self._available = False

        if not PYGAME_AVAILABLE or not config.audio.enabled:
            return

        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=config.audio.sample_rate, size=-16, channels=2)
            self._available = True
        except Exception:
            # No audio device; stay silent
            return

        for cue in AudioCue:
            sound = self._load_clip(cue) or self._build_sound(cue)
            if sound is not None:
                sound.set_volume(self._volume)
                self._sounds[cue] = sound

    @property
    def available(self) -> bool:
        """True if the mixer initialized."""
        return self._available

    @property
    def muted(self) -> bool:
        return self._muted

    def toggle_mute(self) -> None:
        self._muted = not self._muted

    def set_volume(self, volume: float) -> None:
        """Set cue volume (0.0 to 1.0)."""
        self._volume = max(0.0, min(1.0, volume))
        for sound in self._sounds.values():
            sound.set_volume(self._volume)

    def _load_clip(self, cue: AudioCue):
        path = self._config.audio.clip_for(cue.value)
        if not path or not os.path.exists(path):
            return None
        try:
            return pygame.mixer.Sound(path)
        except Exception:
            return None

    def _build_sound(self, cue: AudioCue):
        mixer_rate, _, mixer_channels = pygame.mixer.get_init()
        try:
            buffer = mix_tones(CUE_TONES[cue], mixer_rate, channels=mixer_channels)
            return pygame.sndarray.make_sound(buffer)
        except Exception:
            return None

    def play(self, cue: AudioCue) -> None:
        if self._muted or not self._available:
            return
        sound = self._sounds.get(cue)
        if sound is None:
            return
        try:
            sound.play()
        except Exception:
            pass
