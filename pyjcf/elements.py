"""
Name-level view of a decoded class.

Follows the constant pool references of a ClassFile and returns plain
names, descriptors and annotation values. Resolution happens here, not
during decoding, so a class whose pool has dangling references still
decodes and only fails when such a reference is resolved.
"""

from dataclasses import dataclass, field
from typing import Optional

from .attributes import (
    Annotation,
    ConstantValueAttribute,
    ElementValue,
    ExceptionsAttribute,
    InnerClassesAttribute,
    MethodParametersAttribute,
    RuntimeAnnotationsAttribute,
    SignatureAttribute,
    SourceFileAttribute,
)
from .classfile import AccessFlags, ClassFile, FieldInfo, MethodInfo
from .constants import (
    ConstantDouble,
    ConstantFloat,
    ConstantInteger,
    ConstantLong,
    ConstantPool,
    ConstantString,
)
from .descriptors import FieldType, MethodDescriptor, parse_field_descriptor, parse_method_descriptor


# Java source order of modifier keywords
_CLASS_MODIFIERS = (
    (AccessFlags.PUBLIC, "public"),
    (AccessFlags.PROTECTED, "protected"),
    (AccessFlags.PRIVATE, "private"),
    (AccessFlags.ABSTRACT, "abstract"),
    (AccessFlags.STATIC, "static"),
    (AccessFlags.FINAL, "final"),
)

_FIELD_MODIFIERS = (
    (AccessFlags.PUBLIC, "public"),
    (AccessFlags.PROTECTED, "protected"),
    (AccessFlags.PRIVATE, "private"),
    (AccessFlags.STATIC, "static"),
    (AccessFlags.FINAL, "final"),
    (AccessFlags.TRANSIENT, "transient"),
    (AccessFlags.VOLATILE, "volatile"),
)

_METHOD_MODIFIERS = (
    (AccessFlags.PUBLIC, "public"),
    (AccessFlags.PROTECTED, "protected"),
    (AccessFlags.PRIVATE, "private"),
    (AccessFlags.ABSTRACT, "abstract"),
    (AccessFlags.STATIC, "static"),
    (AccessFlags.FINAL, "final"),
    (AccessFlags.SYNCHRONIZED, "synchronized"),
    (AccessFlags.NATIVE, "native"),
    (AccessFlags.STRICT, "strictfp"),
)


def _modifiers(access_flags: int, table) -> tuple[str, ...]:
    return tuple(word for flag, word in table if access_flags & flag)


def class_modifiers(access_flags: int) -> tuple[str, ...]:
    """Java keywords for class access flags. Interfaces are implicitly abstract,
    so `abstract` is dropped for them."""
    words = _modifiers(access_flags, _CLASS_MODIFIERS)
    if access_flags & AccessFlags.INTERFACE:
        words = tuple(w for w in words if w != "abstract")
    return words


def field_modifiers(access_flags: int) -> tuple[str, ...]:
    return _modifiers(access_flags, _FIELD_MODIFIERS)


def method_modifiers(access_flags: int) -> tuple[str, ...]:
    return _modifiers(access_flags, _METHOD_MODIFIERS)


def class_kind(access_flags: int) -> str:
    if access_flags & AccessFlags.MODULE:
        return "module"
    if access_flags & AccessFlags.ANNOTATION:
        return "@interface"
    if access_flags & AccessFlags.INTERFACE:
        return "interface"
    if access_flags & AccessFlags.ENUM:
        return "enum"
    return "class"


@dataclass(frozen=True)
class ResolvedAnnotation:
    """An annotation with its type and element values resolved."""
    type_name: str
    elements: dict = field(default_factory=dict)
    visible: bool = True


@dataclass(frozen=True)
class ResolvedField:
    access_flags: int
    name: str
    descriptor: str
    signature: Optional[str] = None
    constant_value: object = None
    annotations: tuple[ResolvedAnnotation, ...] = ()

    @property
    def type(self) -> FieldType:
        return parse_field_descriptor(self.descriptor)

    @property
    def modifiers(self) -> tuple[str, ...]:
        return field_modifiers(self.access_flags)


@dataclass(frozen=True)
class ResolvedMethod:
    access_flags: int
    name: str
    descriptor: str
    signature: Optional[str] = None
    exceptions: tuple[str, ...] = ()
    parameter_names: tuple[Optional[str], ...] = ()
    annotations: tuple[ResolvedAnnotation, ...] = ()
    has_code: bool = False

    @property
    def method_type(self) -> MethodDescriptor:
        return parse_method_descriptor(self.descriptor)

    @property
    def modifiers(self) -> tuple[str, ...]:
        return method_modifiers(self.access_flags)

    @property
    def is_constructor(self) -> bool:
        return self.name == "<init>"

    @property
    def is_static_initializer(self) -> bool:
        return self.name == "<clinit>"


@dataclass(frozen=True)
class ResolvedInnerClass:
    inner_name: str
    outer_name: Optional[str]
    simple_name: Optional[str]
    access_flags: int


@dataclass(frozen=True)
class ResolvedClass:
    """Resolved class file information."""
    version: tuple[int, int]
    access_flags: int
    name: str
    super_class: Optional[str]
    interfaces: tuple[str, ...]
    fields: tuple[ResolvedField, ...]
    methods: tuple[ResolvedMethod, ...]
    signature: Optional[str] = None
    source_file: Optional[str] = None
    annotations: tuple[ResolvedAnnotation, ...] = ()
    inner_classes: tuple[ResolvedInnerClass, ...] = ()

    @property
    def kind(self) -> str:
        return class_kind(self.access_flags)

    @property
    def modifiers(self) -> tuple[str, ...]:
        return class_modifiers(self.access_flags)

    def find_method(self, name: str, descriptor: Optional[str] = None) -> Optional[ResolvedMethod]:
        for method in self.methods:
            if method.name == name and (descriptor is None or method.descriptor == descriptor):
                return method
        return None

    def find_field(self, name: str) -> Optional[ResolvedField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


def _element_value(value: ElementValue, pool: ConstantPool):
    tag = value.tag
    if tag == "s":
        return pool.get_utf8(value.value)
    elif tag in "BCIJSZ":
        # int-like constants share CONSTANT_Integer, except J
        num = pool.get_long(value.value) if tag == "J" else pool.get_integer(value.value)
        if tag == "Z":
            return bool(num)
        if tag == "C":
            return chr(num)
        return num
    elif tag == "F":
        return pool.get_float(value.value)
    elif tag == "D":
        return pool.get_double(value.value)
    elif tag == "e":
        type_idx, const_idx = value.value
        return (pool.get_utf8(type_idx), pool.get_utf8(const_idx))
    elif tag == "c":
        return pool.get_utf8(value.value)
    elif tag == "@":
        return _annotation(value.value, pool)
    elif tag == "[":
        return tuple(_element_value(v, pool) for v in value.value)
    raise ValueError(f"Unknown element value tag: {tag!r}")


def _annotation(annotation: Annotation, pool: ConstantPool, visible: bool = True) -> ResolvedAnnotation:
    elements = {
        pool.get_utf8(name_idx): _element_value(value, pool)
        for name_idx, value in annotation.element_value_pairs
    }
    return ResolvedAnnotation(pool.get_utf8(annotation.type_index), elements, visible)


def _annotations(attributes, pool: ConstantPool) -> tuple[ResolvedAnnotation, ...]:
    annotations = []
    for attr in attributes:
        if isinstance(attr, RuntimeAnnotationsAttribute):
            annotations.extend(_annotation(a, pool, attr.visible) for a in attr.annotations)
    return tuple(annotations)


def _signature(attributes, pool: ConstantPool) -> Optional[str]:
    for attr in attributes:
        if isinstance(attr, SignatureAttribute):
            return pool.get_utf8(attr.signature_index)
    return None


def _constant_value(index: int, pool: ConstantPool):
    entry = pool.get(index)
    if isinstance(entry, ConstantString):
        return pool.get_utf8(entry.string_index)
    if isinstance(entry, (ConstantInteger, ConstantLong, ConstantFloat, ConstantDouble)):
        return entry.value
    return pool.text_of(index)


def resolve_field(info: FieldInfo, pool: ConstantPool) -> ResolvedField:
    const = info.get_attribute(ConstantValueAttribute)
    return ResolvedField(
        access_flags=info.access_flags,
        name=pool.get_utf8(info.name_index),
        descriptor=pool.get_utf8(info.descriptor_index),
        signature=_signature(info.attributes, pool),
        constant_value=_constant_value(const.constantvalue_index, pool) if const else None,
        annotations=_annotations(info.attributes, pool),
    )


def resolve_method(info: MethodInfo, pool: ConstantPool) -> ResolvedMethod:
    exceptions = info.get_attribute(ExceptionsAttribute)
    params = info.get_attribute(MethodParametersAttribute)
    parameter_names = ()
    if params:
        parameter_names = tuple(
            pool.get_utf8(p.name_index) if p.name_index else None
            for p in params.parameters
        )
    return ResolvedMethod(
        access_flags=info.access_flags,
        name=pool.get_utf8(info.name_index),
        descriptor=pool.get_utf8(info.descriptor_index),
        signature=_signature(info.attributes, pool),
        exceptions=tuple(pool.get_class_name(i) for i in exceptions.exception_index_table) if exceptions else (),
        parameter_names=parameter_names,
        annotations=_annotations(info.attributes, pool),
        has_code=info.code is not None,
    )


def resolve_class(cf: ClassFile) -> ResolvedClass:
    """Resolve a decoded class to names.

    Raises the constant pool lookup errors if a reference is dangling or
    points at the wrong kind of entry.
    """
    pool = cf.constant_pool

    inner_classes = []
    inner = cf.get_attribute(InnerClassesAttribute)
    if inner:
        for entry in inner.classes:
            inner_classes.append(ResolvedInnerClass(
                inner_name=pool.get_class_name(entry.inner_class_info_index),
                outer_name=pool.get_class_name(entry.outer_class_info_index)
                if entry.outer_class_info_index else None,
                simple_name=pool.get_utf8(entry.inner_name_index) if entry.inner_name_index else None,
                access_flags=entry.inner_class_access_flags,
            ))

    source = cf.get_attribute(SourceFileAttribute)
    return ResolvedClass(
        version=cf.version,
        access_flags=cf.access_flags,
        name=cf.name,
        super_class=cf.super_name,
        interfaces=tuple(pool.get_class_name(i) for i in cf.interfaces),
        fields=tuple(resolve_field(f, pool) for f in cf.fields),
        methods=tuple(resolve_method(m, pool) for m in cf.methods),
        signature=_signature(cf.attributes, pool),
        source_file=pool.get_utf8(source.sourcefile_index) if source else None,
        annotations=_annotations(cf.attributes, pool),
        inner_classes=tuple(inner_classes),
    )
