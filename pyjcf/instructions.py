"""
Decoding of the bytecode stream held by a Code attribute.
"""

import logging
from dataclasses import dataclass
from typing import Union

from .cursor import ByteCursor
from .errors import (
    InvalidInstructionOperandError,
    UnexpectedEofError,
    UnknownOpcodeError,
)
from .opcodes import BRANCH_OPCODES, OPERAND_SHAPES, WIDENABLE, Opcode

logger = logging.getLogger("pyjcf.instructions")


@dataclass(frozen=True)
class TableSwitch:
    """Operand of tableswitch. Offsets are relative to the switch opcode."""
    default: int
    low: int
    high: int
    offsets: tuple[int, ...]


@dataclass(frozen=True)
class LookupSwitch:
    """Operand of lookupswitch: (match, offset) pairs in encoding order."""
    default: int
    pairs: tuple[tuple[int, int], ...]


Operand = Union[int, TableSwitch, LookupSwitch]


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction.

    `offset` is the position of the first byte (the `wide` prefix, if any)
    within the method body and `length` the number of bytes it occupies,
    switch padding included. Branch operands stay relative; use
    `branch_targets` for absolute offsets.
    """
    offset: int
    opcode: Opcode
    operands: tuple[Operand, ...] = ()
    length: int = 1
    wide: bool = False

    @property
    def mnemonic(self) -> str:
        return self.opcode.mnemonic

    @property
    def is_branch(self) -> bool:
        return self.opcode in BRANCH_OPCODES

    @property
    def branch_targets(self) -> tuple[int, ...]:
        """Absolute code offsets this instruction may jump to."""
        if not self.is_branch:
            return ()
        operand = self.operands[0]
        if isinstance(operand, TableSwitch):
            return (self.offset + operand.default,) + tuple(
                self.offset + off for off in operand.offsets)
        if isinstance(operand, LookupSwitch):
            return (self.offset + operand.default,) + tuple(
                self.offset + off for _, off in operand.pairs)
        return (self.offset + operand,)

    def __str__(self) -> str:
        name = self.mnemonic
        if self.wide:
            name = f"wide {name}"
        if not self.operands:
            return f"{self.offset}: {name}"
        if self.is_branch and isinstance(self.operands[0], int):
            return f"{self.offset}: {name} {self.branch_targets[0]}"
        args = ", ".join(str(op) for op in self.operands)
        return f"{self.offset}: {name} {args}"


def decode_instructions(code: bytes, base: int = 0) -> tuple[Instruction, ...]:
    """Decode a whole method body.

    `base` is the absolute file offset of `code`, used only for error
    reporting. Instruction offsets are relative to the start of `code`.
    """
    cursor = ByteCursor(code, base=base)
    instructions = []
    while not cursor.at_end:
        instructions.append(_decode_one(cursor))
    logger.debug("Decoded %s instructions from %s bytes", len(instructions), len(code))
    return tuple(instructions)


def _decode_one(cursor: ByteCursor) -> Instruction:
    start = cursor.position
    byte = cursor.read_u1()
    try:
        opcode = Opcode(byte)
    except ValueError:
        raise UnknownOpcodeError(f"Unknown opcode 0x{byte:02X}", offset=cursor.base + start) from None

    try:
        if opcode == Opcode.WIDE:
            return _decode_wide(cursor, start)
        if opcode == Opcode.TABLESWITCH:
            return _decode_tableswitch(cursor, start)
        if opcode == Opcode.LOOKUPSWITCH:
            return _decode_lookupswitch(cursor, start)

        operands = tuple(_read_operand(cursor, kind) for kind in OPERAND_SHAPES[opcode])
    except UnexpectedEofError as exc:
        raise InvalidInstructionOperandError(
            f"{opcode.mnemonic} at {start} runs past the end of the code array",
            offset=cursor.base + start,
        ) from exc
    return Instruction(start, opcode, operands, cursor.position - start)


def _read_operand(cursor: ByteCursor, kind: str) -> int:
    if kind == "s1" or kind == "const":
        return cursor.read_i1()
    elif kind == "s2" or kind == "br2":
        return cursor.read_i2()
    elif kind == "br4":
        return cursor.read_i4()
    elif kind == "u1" or kind == "cp1" or kind == "local":
        return cursor.read_u1()
    elif kind == "cp2":
        return cursor.read_u2()
    raise ValueError(f"Unhandled operand kind: {kind}")


def _decode_wide(cursor: ByteCursor, start: int) -> Instruction:
    byte = cursor.read_u1()
    try:
        opcode = Opcode(byte)
    except ValueError:
        opcode = None
    if opcode not in WIDENABLE:
        raise InvalidInstructionOperandError(
            f"wide cannot modify opcode 0x{byte:02X}", offset=cursor.base + start)

    operands = [cursor.read_u2()]
    if opcode == Opcode.IINC:
        operands.append(cursor.read_i2())
    return Instruction(start, opcode, tuple(operands), cursor.position - start, wide=True)


def _skip_padding(cursor: ByteCursor, start: int):
    """Skip the 0-3 zero bytes that align the table to a multiple of four."""
    padding = (4 - cursor.position % 4) % 4
    pad = cursor.read_bytes(padding)
    if any(pad):
        raise InvalidInstructionOperandError(
            f"Non-zero padding in switch at {start}", offset=cursor.base + start)


def _decode_tableswitch(cursor: ByteCursor, start: int) -> Instruction:
    _skip_padding(cursor, start)
    default = cursor.read_i4()
    low = cursor.read_i4()
    high = cursor.read_i4()
    if low > high:
        raise InvalidInstructionOperandError(
            f"tableswitch at {start} has low {low} > high {high}", offset=cursor.base + start)
    count = high - low + 1
    if count * 4 > cursor.remaining:
        raise InvalidInstructionOperandError(
            f"tableswitch at {start} declares {count} offsets past the end of the code array",
            offset=cursor.base + start)
    offsets = tuple(cursor.read_i4() for _ in range(count))
    table = TableSwitch(default, low, high, offsets)
    return Instruction(start, Opcode.TABLESWITCH, (table,), cursor.position - start)


def _decode_lookupswitch(cursor: ByteCursor, start: int) -> Instruction:
    _skip_padding(cursor, start)
    default = cursor.read_i4()
    npairs = cursor.read_i4()
    if npairs < 0:
        raise InvalidInstructionOperandError(
            f"lookupswitch at {start} has negative npairs {npairs}", offset=cursor.base + start)
    if npairs * 8 > cursor.remaining:
        raise InvalidInstructionOperandError(
            f"lookupswitch at {start} declares {npairs} pairs past the end of the code array",
            offset=cursor.base + start)
    pairs = []
    for _ in range(npairs):
        match = cursor.read_i4()
        pairs.append((match, cursor.read_i4()))
    table = LookupSwitch(default, tuple(pairs))
    return Instruction(start, Opcode.LOOKUPSWITCH, (table,), cursor.position - start)
