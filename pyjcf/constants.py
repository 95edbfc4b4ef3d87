"""
Constant pool entries, the pool itself, and the pool reader.
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Iterator, Optional, TypeVar

from .cursor import ByteCursor
from .errors import (
    ClassFormatError,
    InvalidConstantPoolIndexError,
    UnknownConstantPoolTagError,
    WrongConstantPoolEntryKindError,
    error_context,
)

logger = logging.getLogger("pyjcf.constants")


class ConstantPoolTag(IntEnum):
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELDREF = 9
    METHODREF = 10
    INTERFACE_METHODREF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15
    METHOD_TYPE = 16
    DYNAMIC = 17
    INVOKE_DYNAMIC = 18
    MODULE = 19
    PACKAGE = 20


class ReferenceKind(IntEnum):
    """reference_kind values of CONSTANT_MethodHandle."""
    GET_FIELD = 1
    GET_STATIC = 2
    PUT_FIELD = 3
    PUT_STATIC = 4
    INVOKE_VIRTUAL = 5
    INVOKE_STATIC = 6
    INVOKE_SPECIAL = 7
    NEW_INVOKE_SPECIAL = 8
    INVOKE_INTERFACE = 9


@dataclass(frozen=True)
class ConstantPoolEntry:
    """Base class of all constant pool entries."""
    tag: ClassVar[ConstantPoolTag]


@dataclass(frozen=True)
class ConstantUtf8(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.UTF8
    value: str


@dataclass(frozen=True)
class ConstantInteger(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTEGER
    value: int


@dataclass(frozen=True)
class ConstantFloat(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FLOAT
    value: float


@dataclass(frozen=True)
class ConstantLong(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.LONG
    value: int


@dataclass(frozen=True)
class ConstantDouble(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DOUBLE
    value: float


@dataclass(frozen=True)
class ConstantClass(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.CLASS
    name_index: int


@dataclass(frozen=True)
class ConstantString(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.STRING
    string_index: int


@dataclass(frozen=True)
class ConstantFieldref(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FIELDREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantMethodref(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantInterfaceMethodref(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTERFACE_METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantNameAndType(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.NAME_AND_TYPE
    name_index: int
    descriptor_index: int


@dataclass(frozen=True)
class ConstantMethodHandle(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_HANDLE
    reference_kind: int
    reference_index: int


@dataclass(frozen=True)
class ConstantMethodType(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_TYPE
    descriptor_index: int


@dataclass(frozen=True)
class ConstantDynamic(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantInvokeDynamic(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INVOKE_DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantModule(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.MODULE
    name_index: int


@dataclass(frozen=True)
class ConstantPackage(ConstantPoolEntry):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.PACKAGE
    name_index: int


MemberRef = ConstantFieldref | ConstantMethodref | ConstantInterfaceMethodref

E = TypeVar("E", bound=ConstantPoolEntry)


class ConstantPool:
    """1-indexed table of constant pool entries.

    Slot 0 and the slot following a Long or Double hold None and are
    rejected by every accessor. Entries keep raw indices; references
    between entries are checked only when an accessor follows them.
    """

    def __init__(self, entries: Optional[list[Optional[ConstantPoolEntry]]] = None):
        self._entries: list[Optional[ConstantPoolEntry]] = [None]  # 1-indexed
        if entries:
            self._entries.extend(entries)

    def __len__(self) -> int:
        """One more than the highest index, phantom slots included."""
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, ConstantPoolEntry]]:
        """Yield (index, entry) for every real entry, skipping phantom slots."""
        for idx, entry in enumerate(self._entries):
            if entry is not None:
                yield idx, entry

    def _append(self, entry: ConstantPoolEntry) -> int:
        idx = len(self._entries)
        self._entries.append(entry)
        # Long and Double take two slots
        if entry.tag in (ConstantPoolTag.LONG, ConstantPoolTag.DOUBLE):
            self._entries.append(None)
        return idx

    def get(self, index: int) -> ConstantPoolEntry:
        """Return the entry at `index`, whatever its kind."""
        if not 0 < index < len(self._entries):
            raise InvalidConstantPoolIndexError(
                f"Constant pool index {index} out of range 1..{len(self._entries) - 1}")
        entry = self._entries[index]
        if entry is None:
            raise InvalidConstantPoolIndexError(
                f"Constant pool index {index} is the unusable slot after a Long/Double")
        return entry

    def _get_typed(self, index: int, kind: type[E]) -> E:
        entry = self.get(index)
        if not isinstance(entry, kind):
            raise WrongConstantPoolEntryKindError(
                f"Expected {kind.tag.name} at index {index}, got {entry.tag.name}")
        return entry

    def get_utf8(self, index: int) -> str:
        return self._get_typed(index, ConstantUtf8).value

    def get_integer(self, index: int) -> int:
        return self._get_typed(index, ConstantInteger).value

    def get_float(self, index: int) -> float:
        return self._get_typed(index, ConstantFloat).value

    def get_long(self, index: int) -> int:
        return self._get_typed(index, ConstantLong).value

    def get_double(self, index: int) -> float:
        return self._get_typed(index, ConstantDouble).value

    def get_class(self, index: int) -> ConstantClass:
        return self._get_typed(index, ConstantClass)

    def get_class_name(self, index: int) -> str:
        """Resolve a Class entry to its internal name, e.g. java/lang/String."""
        return self.get_utf8(self.get_class(index).name_index)

    def get_string(self, index: int) -> str:
        """Resolve a String entry to its text."""
        return self.get_utf8(self._get_typed(index, ConstantString).string_index)

    def get_fieldref(self, index: int) -> ConstantFieldref:
        return self._get_typed(index, ConstantFieldref)

    def get_methodref(self, index: int) -> ConstantMethodref:
        return self._get_typed(index, ConstantMethodref)

    def get_interface_methodref(self, index: int) -> ConstantInterfaceMethodref:
        return self._get_typed(index, ConstantInterfaceMethodref)

    def get_member_ref(self, index: int) -> MemberRef:
        """Any of Fieldref, Methodref or InterfaceMethodref."""
        entry = self.get(index)
        if not isinstance(entry, (ConstantFieldref, ConstantMethodref, ConstantInterfaceMethodref)):
            raise WrongConstantPoolEntryKindError(
                f"Expected a member reference at index {index}, got {entry.tag.name}")
        return entry

    def get_name_and_type(self, index: int) -> ConstantNameAndType:
        return self._get_typed(index, ConstantNameAndType)

    def get_method_handle(self, index: int) -> ConstantMethodHandle:
        return self._get_typed(index, ConstantMethodHandle)

    def get_method_type(self, index: int) -> ConstantMethodType:
        return self._get_typed(index, ConstantMethodType)

    def get_dynamic(self, index: int) -> ConstantDynamic:
        return self._get_typed(index, ConstantDynamic)

    def get_invoke_dynamic(self, index: int) -> ConstantInvokeDynamic:
        return self._get_typed(index, ConstantInvokeDynamic)

    def get_module(self, index: int) -> ConstantModule:
        return self._get_typed(index, ConstantModule)

    def get_package(self, index: int) -> ConstantPackage:
        return self._get_typed(index, ConstantPackage)

    def text_of(self, index: int) -> str:
        """Human readable rendering of the entry at `index`."""
        entry = self.get(index)
        if isinstance(entry, ConstantUtf8):
            return entry.value
        elif isinstance(entry, (ConstantInteger, ConstantLong)):
            return str(entry.value)
        elif isinstance(entry, (ConstantFloat, ConstantDouble)):
            return _format_float(entry.value)
        elif isinstance(entry, (ConstantClass, ConstantModule, ConstantPackage)):
            return self.get_utf8(entry.name_index)
        elif isinstance(entry, ConstantString):
            return self.get_utf8(entry.string_index)
        elif isinstance(entry, (ConstantFieldref, ConstantMethodref, ConstantInterfaceMethodref)):
            owner = self.get_class_name(entry.class_index)
            return f"{owner}.{self.text_of(entry.name_and_type_index)}"
        elif isinstance(entry, ConstantNameAndType):
            name = self.get_utf8(entry.name_index)
            return f"{name}:{self.get_utf8(entry.descriptor_index)}"
        elif isinstance(entry, ConstantMethodHandle):
            kind = _reference_kind_name(entry.reference_kind)
            return f"{kind} {self.text_of(entry.reference_index)}"
        elif isinstance(entry, ConstantMethodType):
            return self.get_utf8(entry.descriptor_index)
        elif isinstance(entry, (ConstantDynamic, ConstantInvokeDynamic)):
            nat = self.text_of(entry.name_and_type_index)
            return f"#{entry.bootstrap_method_attr_index}:{nat}"
        raise WrongConstantPoolEntryKindError(f"Cannot render {entry.tag.name} at index {index}")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(value)


def _reference_kind_name(kind: int) -> str:
    try:
        return ReferenceKind(kind).name
    except ValueError:
        return f"REF_{kind}"


def decode_modified_utf8(data: bytes) -> str:
    """Decode the JVM's modified UTF-8.

    NUL is stored as C0 80 and supplementary characters as two 3-byte
    surrogate encodings. Malformed input decodes with replacement characters.
    """
    data = bytes(data).replace(b"\xc0\x80", b"\x00")
    try:
        text = data.decode("utf-8", errors="surrogatepass")
    except UnicodeDecodeError:
        return data.decode("utf-8", errors="replace")
    if any("\ud800" <= ch <= "\udfff" for ch in text):
        # Join surrogate pairs; lone surrogates become U+FFFD
        text = text.encode("utf-16-le", errors="surrogatepass").decode("utf-16-le", errors="replace")
    return text


def read_constant_pool(cursor: ByteCursor) -> ConstantPool:
    """Read constant_pool_count and the entries that follow it."""
    with error_context("constant_pool_count", cursor.offset):
        count = cursor.read_u2()
    pool = ConstantPool()
    while len(pool) < count:
        start = cursor.offset
        index = len(pool)
        try:
            entry = _read_constant(cursor)
        except ClassFormatError as exc:
            exc.add_context(f"constant_pool[{index}]", start)
            raise
        pool._append(entry)
    if len(pool) > count and count > 0:
        # A trailing Long/Double claimed the slot past the declared count
        logger.debug("8-byte constant at index %s overruns constant_pool_count %s",
                     len(pool) - 2, count)
    logger.debug("Read constant pool with %s slots", len(pool))
    return pool


def _read_constant(cursor: ByteCursor) -> ConstantPoolEntry:
    tag_offset = cursor.offset
    tag = cursor.read_u1()

    if tag == ConstantPoolTag.UTF8:
        length = cursor.read_u2()
        return ConstantUtf8(decode_modified_utf8(cursor.read_bytes(length)))

    elif tag == ConstantPoolTag.INTEGER:
        return ConstantInteger(cursor.read_i4())

    elif tag == ConstantPoolTag.FLOAT:
        return ConstantFloat(cursor.read_f4())

    elif tag == ConstantPoolTag.LONG:
        return ConstantLong(cursor.read_i8())

    elif tag == ConstantPoolTag.DOUBLE:
        return ConstantDouble(cursor.read_f8())

    elif tag == ConstantPoolTag.CLASS:
        return ConstantClass(cursor.read_u2())

    elif tag == ConstantPoolTag.STRING:
        return ConstantString(cursor.read_u2())

    elif tag == ConstantPoolTag.FIELDREF:
        class_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return ConstantFieldref(class_idx, nat_idx)

    elif tag == ConstantPoolTag.METHODREF:
        class_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return ConstantMethodref(class_idx, nat_idx)

    elif tag == ConstantPoolTag.INTERFACE_METHODREF:
        class_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return ConstantInterfaceMethodref(class_idx, nat_idx)

    elif tag == ConstantPoolTag.NAME_AND_TYPE:
        name_idx = cursor.read_u2()
        desc_idx = cursor.read_u2()
        return ConstantNameAndType(name_idx, desc_idx)

    elif tag == ConstantPoolTag.METHOD_HANDLE:
        kind = cursor.read_u1()
        ref_idx = cursor.read_u2()
        return ConstantMethodHandle(kind, ref_idx)

    elif tag == ConstantPoolTag.METHOD_TYPE:
        return ConstantMethodType(cursor.read_u2())

    elif tag == ConstantPoolTag.DYNAMIC:
        bootstrap_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return ConstantDynamic(bootstrap_idx, nat_idx)

    elif tag == ConstantPoolTag.INVOKE_DYNAMIC:
        bootstrap_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return ConstantInvokeDynamic(bootstrap_idx, nat_idx)

    elif tag == ConstantPoolTag.MODULE:
        return ConstantModule(cursor.read_u2())

    elif tag == ConstantPoolTag.PACKAGE:
        return ConstantPackage(cursor.read_u2())

    raise UnknownConstantPoolTagError(f"Unknown constant pool tag: {tag}", offset=tag_offset)
