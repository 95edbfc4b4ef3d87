"""
Top-level class file decoding.

Reads the header, constant pool, member tables and class attributes of a
JVM class file, strictly in file order.
"""

import logging
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import Optional

from .attributes import A, Attribute, CodeAttribute, find_attribute, read_attributes
from .constants import ConstantPool, read_constant_pool
from .cursor import ByteCursor
from .errors import InvalidMagicError, error_context

logger = logging.getLogger("pyjcf.classfile")

MAGIC = 0xCAFEBABE


class AccessFlags(IntFlag):
    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SUPER = 0x0020  # For classes (invokespecial semantics)
    SYNCHRONIZED = 0x0020  # For methods
    VOLATILE = 0x0040
    BRIDGE = 0x0040
    TRANSIENT = 0x0080
    VARARGS = 0x0080
    NATIVE = 0x0100
    INTERFACE = 0x0200
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000
    ANNOTATION = 0x2000
    ENUM = 0x4000
    MODULE = 0x8000  # For classes; MANDATED on parameters and module directives


@dataclass(frozen=True)
class FieldInfo:
    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()

    def get_attribute(self, kind: type[A]) -> Optional[A]:
        return find_attribute(self.attributes, kind)


@dataclass(frozen=True)
class MethodInfo:
    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()

    def get_attribute(self, kind: type[A]) -> Optional[A]:
        return find_attribute(self.attributes, kind)

    @property
    def code(self) -> Optional[CodeAttribute]:
        """The first Code attribute; abstract and native methods have none."""
        return find_attribute(self.attributes, CodeAttribute)


@dataclass(frozen=True)
class ClassFile:
    """A decoded class file. Indices refer to `constant_pool`."""
    magic: int
    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    access_flags: int
    this_class: int
    super_class: int  # 0 for java/lang/Object and module-info
    interfaces: tuple[int, ...]
    fields: tuple[FieldInfo, ...]
    methods: tuple[MethodInfo, ...]
    attributes: tuple[Attribute, ...]

    @property
    def version(self) -> tuple[int, int]:
        return (self.major_version, self.minor_version)

    @property
    def name(self) -> str:
        return self.constant_pool.get_class_name(self.this_class)

    @property
    def super_name(self) -> Optional[str]:
        if self.super_class == 0:
            return None
        return self.constant_pool.get_class_name(self.super_class)

    def get_attribute(self, kind: type[A]) -> Optional[A]:
        return find_attribute(self.attributes, kind)


def _read_member(cursor: ByteCursor, pool: ConstantPool, kind):
    access = cursor.read_u2()
    name_idx = cursor.read_u2()
    desc_idx = cursor.read_u2()
    attrs = read_attributes(cursor, pool)
    return kind(access, name_idx, desc_idx, attrs)


def _read_members(cursor: ByteCursor, pool: ConstantPool, kind, section: str) -> tuple:
    with error_context(f"{section}_count", cursor.offset):
        count = cursor.read_u2()
    members = []
    for i in range(count):
        with error_context(f"{section}[{i}]", cursor.offset):
            members.append(_read_member(cursor, pool, kind))
    logger.debug("Read %s %s", count, section)
    return tuple(members)


def decode_class(data: bytes | bytearray | memoryview) -> ClassFile:
    """Decode a complete class file from bytes.

    Raises a ClassFormatError subclass on the first problem found; no
    partial result is returned.
    """
    cursor = ByteCursor(data)

    # Magic number
    with error_context("magic", 0):
        magic = cursor.read_u4()
        if magic != MAGIC:
            raise InvalidMagicError(f"Invalid class file magic: {hex(magic)}", offset=0)

    # Version
    with error_context("version", cursor.offset):
        minor = cursor.read_u2()
        major = cursor.read_u2()
    logger.debug("Class file version %s.%s", major, minor)

    # Constant pool
    pool = read_constant_pool(cursor)

    # Access flags, this/super class
    with error_context("access_flags", cursor.offset):
        access_flags = cursor.read_u2()
    with error_context("this_class", cursor.offset):
        this_class = cursor.read_u2()
    with error_context("super_class", cursor.offset):
        super_class = cursor.read_u2()

    # Interfaces
    with error_context("interfaces_count", cursor.offset):
        interfaces_count = cursor.read_u2()
    interfaces = []
    for i in range(interfaces_count):
        with error_context(f"interfaces[{i}]", cursor.offset):
            interfaces.append(cursor.read_u2())

    fields = _read_members(cursor, pool, FieldInfo, "fields")
    methods = _read_members(cursor, pool, MethodInfo, "methods")

    # Class attributes
    attributes = read_attributes(cursor, pool)

    if not cursor.at_end:
        logger.debug("Ignoring %s trailing bytes after class attributes", cursor.remaining)

    return ClassFile(
        magic=magic,
        minor_version=minor,
        major_version=major,
        constant_pool=pool,
        access_flags=access_flags,
        this_class=this_class,
        super_class=super_class,
        interfaces=tuple(interfaces),
        fields=fields,
        methods=methods,
        attributes=attributes,
    )


def read_class_file(path: str | Path) -> ClassFile:
    """Read a single class file."""
    return decode_class(Path(path).read_bytes())
