"""CHIP-8 instruction decoding.

``decode`` turns a 16-bit word into a :class:`DecodedInstruction` whose ``op``
field names one :class:`Op`. It is written with ``jax.numpy`` so it works
both on Python integers and on traced words inside ``jax.jit``.
"""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    """Every instruction the interpreter understands, plus ``INVALID``."""
    CLS = 0            # 00E0
    RET = 1            # 00EE
    JP = 2             # 1NNN
    CALL = 3           # 2NNN
    SE_IMM = 4         # 3XNN
    SNE_IMM = 5        # 4XNN
    SE_REG = 6         # 5XY0
    LD_IMM = 7         # 6XNN
    ADD_IMM = 8        # 7XNN
    LD_REG = 9         # 8XY0
    OR = 10            # 8XY1
    AND = 11           # 8XY2
    XOR = 12           # 8XY3
    ADD_REG = 13       # 8XY4
    SUB = 14           # 8XY5
    SHR = 15           # 8XY6
    SUBN = 16          # 8XY7
    SHL = 17           # 8XYE
    SNE_REG = 18       # 9XY0
    LD_I = 19          # ANNN
    JP_OFFSET = 20     # BNNN
    RND = 21           # CXNN
    DRW = 22           # DXYN
    SKP = 23           # EX9E
    SKNP = 24          # EXA1
    LD_VX_DT = 25      # FX07
    LD_VX_K = 26       # FX0A
    LD_DT_VX = 27      # FX15
    LD_ST_VX = 28      # FX18
    ADD_I = 29         # FX1E
    LD_F = 30          # FX29
    LD_B = 31          # FX33
    STORE = 32         # FX55
    LOAD = 33          # FX65
    INVALID = 34


# (mask, value, op): a word matches when word & mask == value.
OPCODE_PATTERNS = [
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_IMM),
    (0xF000, 0x4000, Op.SNE_IMM),
    (0xF00F, 0x5000, Op.SE_REG),
    (0xF000, 0x6000, Op.LD_IMM),
    (0xF000, 0x7000, Op.ADD_IMM),
    (0xF00F, 0x8000, Op.LD_REG),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REG),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),
    (0xF00F, 0x9000, Op.SNE_REG),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_OFFSET),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),
    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),
    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.LD_VX_K),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I),
    (0xF0FF, 0xF029, Op.LD_F),
    (0xF0FF, 0xF033, Op.LD_B),
    (0xF0FF, 0xF055, Op.STORE),
    (0xF0FF, 0xF065, Op.LOAD),
]


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op member
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def classify(instruction) -> jnp.ndarray:
    """Return the ``Op`` index for a 16-bit word (``Op.INVALID`` if none match)."""
    word = jnp.astype(instruction, jnp.uint16)
    return jnp.select(
        [(word & mask) == value for mask, value, _ in OPCODE_PATTERNS],
        [int(op) for _, _, op in OPCODE_PATTERNS],
        default=int(Op.INVALID),
    )


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction),
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
