"""CHIP-8 delay and sound timers.

The timers run at a fixed 60 Hz, independent of how fast instructions are
executed. :func:`tick_timers` is the only place they count down, and it
touches nothing but the two timer fields.
"""

import time
from typing import Callable

import jax.numpy as jnp
from chax.state import EmulatorState
from chax.constants import TIMER_FREQUENCY


def _count_down(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers by one, stopping at zero."""
    return state.replace(
        delay_timer=_count_down(state.delay_timer),
        sound_timer=_count_down(state.sound_timer),
    )


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether the beeper should be sounding."""
    return state.sound_timer > 0


class TimerClock:
    """Turns elapsed wall-clock time into a count of due timer ticks.

    Polled once per driver-loop iteration; the fractional remainder carries
    over to the next poll so no tick is lost or doubled.
    """

    def __init__(self, frequency: int = TIMER_FREQUENCY, clock: Callable[[], float] = time.perf_counter):
        self.frequency = frequency
        self.clock = clock
        self.reset()

    def reset(self):
        self._start = self.clock()
        self._ticks = 0

    def due_ticks(self) -> int:
        elapsed_ticks = int((self.clock() - self._start) * self.frequency)
        due = elapsed_ticks - self._ticks
        self._ticks = elapsed_ticks
        return max(due, 0)
