"""
Exceptions raised while decoding class files.
"""

from contextlib import contextmanager
from typing import Optional


class ClassFormatError(Exception):
    """Base class for all class file decoding errors.

    Args:
        msg: Description of the problem.
        offset: Absolute byte offset where the problem was detected.
        loc: Structural path to the failing item, outermost first.
    """

    def __init__(self, msg: str, offset: Optional[int] = None,
                 loc: Optional[list[str]] = None):
        super().__init__(msg)
        self.offset = offset
        self.loc = loc or []

    def add_context(self, section: str, offset: Optional[int] = None):
        """Prepend an enclosing section; fill in the offset if still unknown."""
        self.loc.insert(0, section)
        if self.offset is None:
            self.offset = offset

    def __str__(self) -> str:
        base_msg = super().__str__()
        where = []
        if self.offset is not None:
            where.append(f"at offset {self.offset}")
        if self.loc:
            where.append("in " + ".".join(str(x) for x in self.loc))
        if where:
            return f"{base_msg} ({', '.join(where)})"
        return base_msg


@contextmanager
def error_context(section: str, offset: Optional[int] = None):
    """Add `section` to the location of any ClassFormatError raised inside."""
    try:
        yield
    except ClassFormatError as exc:
        exc.add_context(section, offset)
        raise


class UnexpectedEofError(ClassFormatError):
    """A read ran past the end of the available bytes."""
    pass


class InvalidMagicError(ClassFormatError):
    """The file does not start with 0xCAFEBABE."""
    pass


class InvalidConstantPoolIndexError(ClassFormatError):
    """Index 0, out of range, or the phantom slot after a Long/Double."""
    pass


class WrongConstantPoolEntryKindError(ClassFormatError):
    """The entry exists but is not the requested kind."""
    pass


class UnknownConstantPoolTagError(ClassFormatError):
    pass


class AttributeLengthMismatchError(ClassFormatError):
    """An attribute body did not consume exactly attribute_length bytes."""
    pass


class InvalidAttributeError(ClassFormatError):
    """An attribute body contains a value its grammar does not allow."""
    pass


class UnknownOpcodeError(ClassFormatError):
    pass


class InvalidInstructionOperandError(ClassFormatError):
    """Malformed operand: bad switch padding, truncated table, bad wide form."""
    pass


class DescriptorError(ValueError):
    """A field or method descriptor string could not be parsed."""
    pass
