"""Fatal CHIP-8 error conditions.

Inside traced code an error is a status code recorded on the emulator state
(see :class:`ErrorCode`); a state carrying a nonzero code is halted and every
further step leaves it untouched. Host code turns that status into one of the
exceptions below with :func:`raise_for_status`.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    NONE = 0
    INVALID_OPCODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    MEMORY_OUT_OF_BOUNDS = 4


class Chip8Error(Exception):
    """Base class for all fatal emulator errors."""


class InvalidOpcode(Chip8Error):
    def __init__(self, word: int, address: int):
        self.word = word
        self.address = address
        super().__init__(f"Invalid opcode 0x{word:04X} at 0x{address:03X}")


class StackOverflow(Chip8Error):
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Stack overflow on call at 0x{address:03X}")


class StackUnderflow(Chip8Error):
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Stack underflow on return at 0x{address:03X}")


class MemoryOutOfBounds(Chip8Error):
    def __init__(self, address: int, pc: int | None = None):
        self.address = address
        self.pc = pc
        message = f"Invalid memory address 0x{address:04X}"
        if pc is not None:
            message += f" (instruction at 0x{pc:03X})"
        super().__init__(message)


class RomTooLarge(Chip8Error):
    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"ROM of {size} bytes does not fit in {capacity} bytes of program memory")


class InvalidKey(Chip8Error):
    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Invalid key index: {key!r}")


def error_from_status(code: int, word: int, pc: int, address: int) -> Chip8Error | None:
    """Build the exception matching a recorded status, or None if there is no error."""
    code = ErrorCode(code)
    if code == ErrorCode.NONE:
        return None
    if code == ErrorCode.INVALID_OPCODE:
        return InvalidOpcode(word, pc)
    if code == ErrorCode.STACK_OVERFLOW:
        return StackOverflow(pc)
    if code == ErrorCode.STACK_UNDERFLOW:
        return StackUnderflow(pc)
    return MemoryOutOfBounds(address, pc)


def raise_for_status(state) -> None:
    """Raise the exception recorded on ``state``, if any."""
    error = error_from_status(
        int(state.error), int(state.error_word), int(state.error_pc), int(state.error_address)
    )
    if error is not None:
        raise error
