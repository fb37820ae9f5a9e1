"""Procedurally generated audio cues for pose advance and session completion."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence

import numpy as np

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)

SAMPLE_RATE = 44100
CUE_VOLUME = 0.2

ADVANCE_TONES_HZ = (880.0, 1174.66)
COMPLETION_TONES_HZ = (523.25, 659.25, 783.99, 1046.5)

OutputFn = Callable[[np.ndarray, int], None]


def _tone(frequency: float, duration: float, sample_rate: int, *, fade: float = 0.01) -> np.ndarray:
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    tone = CUE_VOLUME * np.sin(2 * np.pi * frequency * t)
    fade_samples = min(len(t) // 2, int(sample_rate * fade))
    if fade_samples > 0:
        ramp = np.linspace(0.0, 1.0, fade_samples)
        tone[:fade_samples] *= ramp
        tone[-fade_samples:] *= ramp[::-1]
    # Exponential decay gives the chime its bell-like tail.
    tone *= np.exp(-3.0 * t / max(duration, 1e-6))
    return tone


def _sequence(frequencies: Sequence[float], note_seconds: float, gap_seconds: float, sample_rate: int) -> np.ndarray:
    gap = np.zeros(int(sample_rate * gap_seconds))
    parts = []
    for index, frequency in enumerate(frequencies):
        if index:
            parts.append(gap)
        parts.append(_tone(frequency, note_seconds, sample_rate))
    return np.concatenate(parts).astype(np.float32)


def synthesize_advance_cue(sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    return _sequence(ADVANCE_TONES_HZ, 0.12, 0.03, sample_rate)


def synthesize_completion_cue(sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    return _sequence(COMPLETION_TONES_HZ, 0.18, 0.04, sample_rate)


def _sounddevice_output(samples: np.ndarray, sample_rate: int) -> None:
    import sounddevice as sd

    # Non-blocking: the tick loop must not wait for playback.
    sd.play(samples, sample_rate)


class AudioCues:
    """Plays cues unless muted. Failures are logged and never raised."""

    def __init__(
        self,
        muted: bool = False,
        output: Optional[OutputFn] = None,
        *,
        sample_rate: int = SAMPLE_RATE,
    ) -> None:
        self._muted = bool(muted)
        self._output = output or _sounddevice_output
        self._sample_rate = sample_rate
        self._synthesizers: Dict[str, Callable[[int], np.ndarray]] = {
            "advance": synthesize_advance_cue,
            "completion": synthesize_completion_cue,
        }
        self._samples: Dict[str, np.ndarray] = {}

    @property
    def muted(self) -> bool:
        return self._muted

    @muted.setter
    def muted(self, value: bool) -> None:
        self._muted = bool(value)

    def toggle_mute(self) -> bool:
        self._muted = not self._muted
        _ENGINE_LOGGER.debug("Audio cues %s", "muted" if self._muted else "unmuted")
        return self._muted

    def play_advance(self) -> None:
        self._play("advance")

    def play_completion(self) -> None:
        self._play("completion")

    def _play(self, name: str) -> None:
        if self._muted:
            return
        try:
            samples = self._samples.get(name)
            if samples is None:
                samples = self._synthesizers[name](self._sample_rate)
                self._samples[name] = samples
            self._output(samples, self._sample_rate)
        except Exception as exc:
            _ENGINE_LOGGER.warning("Failed to play %s cue: %s", name, exc)

