"""Metronome click scheduling.

Clicks are scheduled with a short lookahead so the audio side can queue
them at exact times: every call to :meth:`Metronome.schedule` returns the
clicks that fall before ``now + schedule_ahead``.  Beat 0 of each bar is
accented.  Producing sound is the caller's business.

In speed-trainer mode the tempo rises by ``TRAINER_STEP`` BPM every
``TRAINER_INTERVAL`` seconds of playback, up to ``TRAINER_MAX_BPM``.
"""

from dataclasses import dataclass

ACCENT_FREQUENCY = 880.0  # high A
BEAT_FREQUENCY = 440.0
MIN_BPM = 20
MAX_BPM = 300

TRAINER_STEP = 5
TRAINER_INTERVAL = 30.0  # seconds
TRAINER_MAX_BPM = 200


@dataclass
class Click:
    time: float
    beat: int
    frequency: float
    duration: float = 0.03


class Metronome:
    def __init__(
        self,
        bpm: int = 60,
        beats_per_bar: int = 4,
        schedule_ahead: float = 0.1,
        speed_trainer: bool = False,
    ):
        self.bpm = _clamp_bpm(bpm)
        self.beats_per_bar = beats_per_bar
        self.schedule_ahead = schedule_ahead
        self.speed_trainer = speed_trainer
        self.is_playing = False
        self._next_time = 0.0
        self._beat = 0
        self._last_ramp = 0.0

    def set_bpm(self, bpm: int) -> None:
        self.bpm = _clamp_bpm(bpm)

    def set_speed_trainer(self, enabled: bool, now: float) -> None:
        """Turn speed-trainer mode on or off; the ramp interval restarts at *now*."""
        self.speed_trainer = enabled
        self._last_ramp = now

    @property
    def seconds_per_beat(self) -> float:
        return 60.0 / self.bpm

    def start(self, now: float) -> None:
        if self.is_playing:
            return
        self.is_playing = True
        self._beat = 0
        self._next_time = now + 0.05
        self._last_ramp = now

    def stop(self) -> None:
        self.is_playing = False

    def toggle(self, now: float) -> bool:
        if self.is_playing:
            self.stop()
        else:
            self.start(now)
        return self.is_playing

    def ramp(self, now: float) -> bool:
        """Apply every trainer step due by *now*.  Returns True if the tempo changed."""
        if not (self.is_playing and self.speed_trainer):
            return False
        changed = False
        while now - self._last_ramp >= TRAINER_INTERVAL:
            self._last_ramp += TRAINER_INTERVAL
            bpm = min(self.bpm + TRAINER_STEP, TRAINER_MAX_BPM)
            changed = changed or bpm != self.bpm
            self.bpm = bpm
        return changed

    def schedule(self, now: float) -> list[Click]:
        """Clicks due before ``now + schedule_ahead``, in order."""
        if not self.is_playing:
            return []
        self.ramp(now)
        clicks = []
        while self._next_time < now + self.schedule_ahead:
            frequency = ACCENT_FREQUENCY if self._beat == 0 else BEAT_FREQUENCY
            clicks.append(Click(time=self._next_time, beat=self._beat, frequency=frequency))
            self._next_time += self.seconds_per_beat
            self._beat = (self._beat + 1) % self.beats_per_bar
        return clicks


def _clamp_bpm(bpm: int) -> int:
    return min(max(int(bpm), MIN_BPM), MAX_BPM)
