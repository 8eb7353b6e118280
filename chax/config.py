"""Machine configuration."""

from flax.struct import dataclass, field

from chax.constants import PROGRAM_START, TIMER_FREQUENCY


@dataclass
class MachineConfig:
    """Static settings for :class:`chax.machine.Machine`.

    Attributes:
        instructions_per_second: CPU speed; CHIP-8 mandates none, 700 is typical
        load_address: Where ROMs are copied and execution starts
        seed: Seed for the default ``jax.random`` byte source
        throttle: Pace ``Machine.run`` to wall-clock time
    """
    instructions_per_second: int = field(pytree_node=False, default=700)
    load_address: int = field(pytree_node=False, default=PROGRAM_START)
    seed: int = field(pytree_node=False, default=0)
    throttle: bool = field(pytree_node=False, default=True)

    @property
    def instructions_per_frame(self) -> int:
        """Instructions executed between two 60 Hz timer ticks."""
        return max(1, self.instructions_per_second // TIMER_FREQUENCY)

    def validate(self) -> "MachineConfig":
        if self.instructions_per_second <= 0:
            raise ValueError(
                f"instructions_per_second must be positive, got {self.instructions_per_second}"
            )
        return self
