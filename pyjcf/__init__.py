"""
pyjcf - JVM class file decoder.
"""

from .classfile import AccessFlags, ClassFile, FieldInfo, MethodInfo, decode_class, read_class_file
from .constants import ConstantPool, ConstantPoolTag
from .descriptors import parse_field_descriptor, parse_method_descriptor
from .elements import resolve_class
from .errors import (
    AttributeLengthMismatchError,
    ClassFormatError,
    DescriptorError,
    InvalidAttributeError,
    InvalidConstantPoolIndexError,
    InvalidInstructionOperandError,
    InvalidMagicError,
    UnexpectedEofError,
    UnknownConstantPoolTagError,
    UnknownOpcodeError,
    WrongConstantPoolEntryKindError,
)
from .instructions import Instruction, LookupSwitch, TableSwitch, decode_instructions
from .opcodes import Opcode

__version__ = "0.1.0"
