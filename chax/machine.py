"""Host-side driver loop around the pure CHIP-8 state transitions.

``Machine`` owns one :class:`EmulatorState`, feeds it keypad input, runs
instructions at the configured speed, ticks the timers at 60 Hz of wall-clock
time and reports frames, sound changes and fatal errors to the host.
"""

import time
from typing import Callable, Iterable, Optional

import jax
import jax.numpy as jnp
import numpy as np

from chax.config import MachineConfig
from chax.constants import NUM_KEYS
from chax.emulator import step, run_n_instructions, load_rom, read_rom
from chax.errors import InvalidKey, error_from_status
from chax.logging import ConsoleLogger
from chax.random import RandomSource, jax_random_byte
from chax.state import EmulatorState, create_state
from chax.timers import TimerClock, sound_active, tick_timers

_step = jax.jit(step)
_tick = jax.jit(tick_timers)


class Machine:
    """CHIP-8 machine with display, sound and error reporting hooks.

    Args:
        config: Static machine settings
        random_source: Byte source for CXNN, see :mod:`chax.random`
        on_frame: Called with the ``bool[64, 32]`` display after every frame
        on_sound: Called with the new sound state whenever it changes
        clock: Monotonic clock in seconds, used for timers and pacing
        sleep: Sleep function used to pace ``run``
        logger: Console logger
    """

    def __init__(
        self,
        config: MachineConfig = None,
        random_source: RandomSource = jax_random_byte,
        on_frame: Optional[Callable[[np.ndarray], None]] = None,
        on_sound: Optional[Callable[[bool], None]] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        logger: ConsoleLogger = None,
    ):
        self.config = (config or MachineConfig()).validate()
        self.random_source = random_source
        self.on_frame = on_frame
        self.on_sound = on_sound
        self.clock = clock
        self.sleep = sleep
        self.logger = logger or ConsoleLogger("chax")

        self.rom = None
        self.frame_count = 0
        self.timer_clock = TimerClock(clock=clock)
        self._sound_reported = False
        self.state = self._fresh_state()

    def _fresh_state(self) -> EmulatorState:
        rng = jax.random.PRNGKey(self.config.seed)
        return create_state(rng, self.random_source, pc=self.config.load_address)

    # Program loading

    def load(self, rom: bytes) -> EmulatorState:
        """Reset the machine and load ``rom`` at the configured address."""
        self.rom = bytes(rom)
        self.reset()
        self.logger.info(f"Loaded {len(self.rom)} bytes at 0x{self.config.load_address:03X}")
        return self.state

    def load_file(self, filename: str) -> EmulatorState:
        self.logger.info(f"Reading ROM {filename}")
        return self.load(read_rom(filename))

    def reset(self):
        """Restore power-on state and reload the current ROM, if any."""
        state = self._fresh_state()
        if self.rom is not None:
            state = load_rom(state, self.rom, self.config.load_address)
        self.state = state
        self.frame_count = 0
        self.timer_clock.reset()
        self._set_sound(False)
        self.logger.info("Machine reset")

    # Input

    def set_keys(self, keys: Iterable[bool]):
        """Replace the state of all 16 keys at once."""
        keys = np.asarray(list(keys), dtype=np.bool_)
        if keys.shape != (NUM_KEYS,):
            raise ValueError(f"Expected {NUM_KEYS} key states, got {keys.shape[0]}")
        self.state = self.state.replace(keypad=jnp.asarray(keys))

    def press(self, key: int):
        self._set_key(key, True)

    def release(self, key: int):
        self._set_key(key, False)

    def _set_key(self, key: int, pressed: bool):
        if not isinstance(key, (int, np.integer)) or not 0 <= key < NUM_KEYS:
            raise InvalidKey(key)
        self.state = self.state.replace(keypad=self.state.keypad.at[key].set(pressed))

    # Outputs

    @property
    def display(self) -> np.ndarray:
        return np.asarray(self.state.display)

    @property
    def sound_active(self) -> bool:
        """Whether the beeper should be sounding right now."""
        return bool(sound_active(self.state))

    @property
    def halted(self) -> bool:
        return bool(self.state.halted)

    @property
    def error(self):
        """The recorded fatal error as an exception, or None."""
        state = self.state
        return error_from_status(
            int(state.error), int(state.error_word), int(state.error_pc), int(state.error_address)
        )

    # Execution

    def cycle(self) -> EmulatorState:
        """Execute one instruction slot, then any timer ticks now due."""
        self._ensure_running()
        self.state = _step(self.state)
        self._check_error()
        self._set_sound(self.sound_active)
        self.tick(self.timer_clock.due_ticks())
        return self.state

    def tick(self, count: int = 1):
        """Apply ``count`` 60 Hz timer ticks."""
        for _ in range(count):
            self.state = _tick(self.state)
        self._set_sound(self.sound_active)

    def run_frame(self, ticks: int = 1) -> EmulatorState:
        """Run one frame worth of instructions followed by ``ticks`` timer ticks."""
        self._ensure_running()
        self.state = run_n_instructions(self.state, self.config.instructions_per_frame)
        self._check_error()
        self._set_sound(self.sound_active)
        self.tick(ticks)
        self.frame_count += 1
        if self.on_frame is not None:
            self.on_frame(self.display)
        return self.state

    def run(self, frames: int = None, should_stop: Callable[["Machine"], bool] = None) -> int:
        """Run frames until ``frames`` have elapsed or ``should_stop`` says so.

        When throttled, frames are paced to 60 per second and timer ticks
        follow the wall clock; otherwise each frame ticks the timers once.
        Returns the number of frames run. Fatal errors propagate.
        """
        frame_period = 1.0 / self.timer_clock.frequency
        next_frame = self.clock()
        self.timer_clock.reset()
        count = 0
        while frames is None or count < frames:
            if should_stop is not None and should_stop(self):
                break
            if self.config.throttle:
                self.run_frame(ticks=self.timer_clock.due_ticks())
                next_frame += frame_period
                delay = next_frame - self.clock()
                if delay > 0:
                    self.sleep(delay)
            else:
                self.run_frame()
            count += 1
        return count

    def _ensure_running(self):
        if self.halted:
            raise self.error

    def _check_error(self):
        error = self.error
        if error is not None:
            self.logger.error(f"Halting: {error}")
            raise error

    def _set_sound(self, active: bool):
        """Report a change of the sound signal to the log and ``on_sound``."""
        if active == self._sound_reported:
            return
        self._sound_reported = active
        self.logger.debug(f"Sound {'on' if active else 'off'}")
        if self.on_sound is not None:
            self.on_sound(active)
