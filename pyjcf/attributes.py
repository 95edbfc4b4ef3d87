"""
Attribute blocks: data classes for each known attribute and their decoders.

Every attribute is read as a header (name index, length) followed by
exactly `attribute_length` bytes. Known attributes are decoded from a cursor
limited to that span; anything the body does not consume, or any attempt
to read past it, is an AttributeLengthMismatchError. Unknown names are kept
as raw bytes.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, ClassVar, Optional, TypeVar

from .constants import ConstantPool
from .cursor import ByteCursor
from .errors import (
    AttributeLengthMismatchError,
    ClassFormatError,
    InvalidAttributeError,
    InvalidInstructionOperandError,
    UnexpectedEofError,
    error_context,
)
from .instructions import Instruction, decode_instructions

logger = logging.getLogger("pyjcf.attributes")


@dataclass(frozen=True)
class Attribute:
    """Base class of all decoded attributes."""
    name: ClassVar[str]


A = TypeVar("A", bound=Attribute)


def find_attribute(attributes: tuple[Attribute, ...], kind: type[A]) -> Optional[A]:
    """Return the first attribute of the given class, or None."""
    for attr in attributes:
        if isinstance(attr, kind):
            return attr
    return None


# ==================== SHARED STRUCTURES ====================

@dataclass(frozen=True)
class ExceptionTableEntry:
    """An entry in a Code attribute's exception table."""
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: int  # 0 for finally (catches all), otherwise constant pool index of class

    @property
    def catches_all(self) -> bool:
        return self.catch_type == 0


@dataclass(frozen=True)
class LineNumberEntry:
    start_pc: int
    line_number: int


@dataclass(frozen=True)
class LocalVariableEntry:
    """Row of LocalVariableTable (descriptor) or LocalVariableTypeTable (signature)."""
    start_pc: int
    length: int
    name_index: int
    descriptor_index: int
    index: int


@dataclass(frozen=True)
class InnerClassEntry:
    inner_class_info_index: int
    outer_class_info_index: int  # 0 for local/anonymous classes
    inner_name_index: int  # 0 for anonymous classes
    inner_class_access_flags: int


@dataclass(frozen=True)
class BootstrapMethod:
    bootstrap_method_ref: int
    bootstrap_arguments: tuple[int, ...]


@dataclass(frozen=True)
class MethodParameter:
    name_index: int  # 0 for an unnamed parameter
    access_flags: int


class VerificationType(IntEnum):
    TOP = 0
    INTEGER = 1
    FLOAT = 2
    DOUBLE = 3
    LONG = 4
    NULL = 5
    UNINITIALIZED_THIS = 6
    OBJECT = 7
    UNINITIALIZED = 8


@dataclass(frozen=True)
class VerificationTypeInfo:
    """A stack map slot. `value` is the class index for OBJECT and the
    offset of the `new` instruction for UNINITIALIZED."""
    tag: VerificationType
    value: Optional[int] = None


@dataclass(frozen=True)
class StackMapFrame:
    """One frame of a StackMapTable.

    `offset_delta` is normalized: for same_frame and same_locals_1_stack_item
    frames it is derived from `frame_type`. `locals` holds the appended
    locals of an append frame or all locals of a full frame.
    """
    frame_type: int
    offset_delta: int
    locals: tuple[VerificationTypeInfo, ...] = ()
    stack: tuple[VerificationTypeInfo, ...] = ()

    @property
    def kind(self) -> str:
        ft = self.frame_type
        if ft <= 63:
            return "same"
        if ft <= 127:
            return "same_locals_1_stack_item"
        if ft == 247:
            return "same_locals_1_stack_item_extended"
        if 248 <= ft <= 250:
            return "chop"
        if ft == 251:
            return "same_extended"
        if 252 <= ft <= 254:
            return "append"
        return "full"

    @property
    def chopped(self) -> int:
        """Number of locals removed by a chop frame."""
        return 251 - self.frame_type if 248 <= self.frame_type <= 250 else 0


@dataclass(frozen=True)
class ElementValue:
    """An annotation element value.

    `value` depends on `tag`: a constant pool index for the constant tags
    (BCDFIJSZs) and for 'c', a (type_name_index, const_name_index) pair for
    'e', an Annotation for '@', and a tuple of ElementValue for '['.
    """
    tag: str
    value: object


@dataclass(frozen=True)
class Annotation:
    type_index: int
    element_value_pairs: tuple[tuple[int, ElementValue], ...] = ()


@dataclass(frozen=True)
class TypeAnnotation:
    """A type annotation; `target_info` holds the raw fields of the target
    union in encoding order (a localvar target holds (start_pc, length,
    index) triples)."""
    target_type: int
    target_info: tuple
    target_path: tuple[tuple[int, int], ...]
    annotation: Annotation


@dataclass(frozen=True)
class ModuleRequires:
    requires_index: int
    requires_flags: int
    requires_version_index: int


@dataclass(frozen=True)
class ModuleExports:
    """An exports or opens directive."""
    index: int
    flags: int
    to_index: tuple[int, ...]


@dataclass(frozen=True)
class ModuleProvides:
    provides_index: int
    provides_with_index: tuple[int, ...]


@dataclass(frozen=True)
class RecordComponent:
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()


# ==================== ATTRIBUTES ====================

@dataclass(frozen=True)
class ConstantValueAttribute(Attribute):
    name: ClassVar[str] = "ConstantValue"
    constantvalue_index: int


@dataclass(frozen=True)
class CodeAttribute(Attribute):
    """Code attribute of a method."""
    name: ClassVar[str] = "Code"
    max_stack: int
    max_locals: int
    code: bytes
    instructions: tuple[Instruction, ...]
    exception_table: tuple[ExceptionTableEntry, ...] = ()
    attributes: tuple[Attribute, ...] = ()

    @property
    def code_length(self) -> int:
        return len(self.code)

    def instruction_at(self, offset: int) -> Optional[Instruction]:
        """The instruction starting at `offset`, or None if no instruction starts there."""
        for instr in self.instructions:
            if instr.offset == offset:
                return instr
            if instr.offset > offset:
                break
        return None

    def check_branch_targets(self):
        """Raise InvalidInstructionOperandError unless every branch lands on an instruction start.

        Decoding does not run this check.
        """
        starts = {instr.offset for instr in self.instructions}
        for instr in self.instructions:
            for target in instr.branch_targets:
                if target not in starts:
                    raise InvalidInstructionOperandError(
                        f"{instr.mnemonic} at {instr.offset} jumps to {target}, "
                        f"which is not the start of an instruction",
                        loc=["code"])

    def get_attribute(self, kind: type[A]) -> Optional[A]:
        return find_attribute(self.attributes, kind)


@dataclass(frozen=True)
class StackMapTableAttribute(Attribute):
    name: ClassVar[str] = "StackMapTable"
    entries: tuple[StackMapFrame, ...]


@dataclass(frozen=True)
class ExceptionsAttribute(Attribute):
    name: ClassVar[str] = "Exceptions"
    exception_index_table: tuple[int, ...]


@dataclass(frozen=True)
class InnerClassesAttribute(Attribute):
    name: ClassVar[str] = "InnerClasses"
    classes: tuple[InnerClassEntry, ...]


@dataclass(frozen=True)
class EnclosingMethodAttribute(Attribute):
    name: ClassVar[str] = "EnclosingMethod"
    class_index: int
    method_index: int  # 0 if not enclosed by a method


@dataclass(frozen=True)
class SyntheticAttribute(Attribute):
    name: ClassVar[str] = "Synthetic"


@dataclass(frozen=True)
class DeprecatedAttribute(Attribute):
    name: ClassVar[str] = "Deprecated"


@dataclass(frozen=True)
class SignatureAttribute(Attribute):
    name: ClassVar[str] = "Signature"
    signature_index: int


@dataclass(frozen=True)
class SourceFileAttribute(Attribute):
    name: ClassVar[str] = "SourceFile"
    sourcefile_index: int


@dataclass(frozen=True)
class SourceDebugExtensionAttribute(Attribute):
    name: ClassVar[str] = "SourceDebugExtension"
    debug_extension: bytes


@dataclass(frozen=True)
class LineNumberTableAttribute(Attribute):
    name: ClassVar[str] = "LineNumberTable"
    line_number_table: tuple[LineNumberEntry, ...]


@dataclass(frozen=True)
class LocalVariableTableAttribute(Attribute):
    name: ClassVar[str] = "LocalVariableTable"
    local_variable_table: tuple[LocalVariableEntry, ...]


@dataclass(frozen=True)
class LocalVariableTypeTableAttribute(Attribute):
    name: ClassVar[str] = "LocalVariableTypeTable"
    local_variable_type_table: tuple[LocalVariableEntry, ...]


@dataclass(frozen=True)
class RuntimeAnnotationsAttribute(Attribute):
    annotations: tuple[Annotation, ...]
    visible: ClassVar[bool]


@dataclass(frozen=True)
class RuntimeVisibleAnnotationsAttribute(RuntimeAnnotationsAttribute):
    name: ClassVar[str] = "RuntimeVisibleAnnotations"
    visible: ClassVar[bool] = True


@dataclass(frozen=True)
class RuntimeInvisibleAnnotationsAttribute(RuntimeAnnotationsAttribute):
    name: ClassVar[str] = "RuntimeInvisibleAnnotations"
    visible: ClassVar[bool] = False


@dataclass(frozen=True)
class RuntimeParameterAnnotationsAttribute(Attribute):
    parameter_annotations: tuple[tuple[Annotation, ...], ...]
    visible: ClassVar[bool]


@dataclass(frozen=True)
class RuntimeVisibleParameterAnnotationsAttribute(RuntimeParameterAnnotationsAttribute):
    name: ClassVar[str] = "RuntimeVisibleParameterAnnotations"
    visible: ClassVar[bool] = True


@dataclass(frozen=True)
class RuntimeInvisibleParameterAnnotationsAttribute(RuntimeParameterAnnotationsAttribute):
    name: ClassVar[str] = "RuntimeInvisibleParameterAnnotations"
    visible: ClassVar[bool] = False


@dataclass(frozen=True)
class RuntimeTypeAnnotationsAttribute(Attribute):
    annotations: tuple[TypeAnnotation, ...]
    visible: ClassVar[bool]


@dataclass(frozen=True)
class RuntimeVisibleTypeAnnotationsAttribute(RuntimeTypeAnnotationsAttribute):
    name: ClassVar[str] = "RuntimeVisibleTypeAnnotations"
    visible: ClassVar[bool] = True


@dataclass(frozen=True)
class RuntimeInvisibleTypeAnnotationsAttribute(RuntimeTypeAnnotationsAttribute):
    name: ClassVar[str] = "RuntimeInvisibleTypeAnnotations"
    visible: ClassVar[bool] = False


@dataclass(frozen=True)
class AnnotationDefaultAttribute(Attribute):
    name: ClassVar[str] = "AnnotationDefault"
    default_value: ElementValue


@dataclass(frozen=True)
class BootstrapMethodsAttribute(Attribute):
    name: ClassVar[str] = "BootstrapMethods"
    bootstrap_methods: tuple[BootstrapMethod, ...]


@dataclass(frozen=True)
class MethodParametersAttribute(Attribute):
    name: ClassVar[str] = "MethodParameters"
    parameters: tuple[MethodParameter, ...]


@dataclass(frozen=True)
class ModuleAttribute(Attribute):
    name: ClassVar[str] = "Module"
    module_name_index: int
    module_flags: int
    module_version_index: int
    requires: tuple[ModuleRequires, ...] = ()
    exports: tuple[ModuleExports, ...] = ()
    opens: tuple[ModuleExports, ...] = ()
    uses_index: tuple[int, ...] = ()
    provides: tuple[ModuleProvides, ...] = ()


@dataclass(frozen=True)
class ModulePackagesAttribute(Attribute):
    name: ClassVar[str] = "ModulePackages"
    package_index: tuple[int, ...]


@dataclass(frozen=True)
class ModuleMainClassAttribute(Attribute):
    name: ClassVar[str] = "ModuleMainClass"
    main_class_index: int


@dataclass(frozen=True)
class NestHostAttribute(Attribute):
    name: ClassVar[str] = "NestHost"
    host_class_index: int


@dataclass(frozen=True)
class NestMembersAttribute(Attribute):
    name: ClassVar[str] = "NestMembers"
    classes: tuple[int, ...]


@dataclass(frozen=True)
class RecordAttribute(Attribute):
    name: ClassVar[str] = "Record"
    components: tuple[RecordComponent, ...]


@dataclass(frozen=True)
class PermittedSubclassesAttribute(Attribute):
    name: ClassVar[str] = "PermittedSubclasses"
    classes: tuple[int, ...]


@dataclass(frozen=True)
class UnrecognizedAttribute(Attribute):
    """An attribute whose name is not in the catalog, kept as raw bytes."""
    name: str
    data: bytes = field(repr=False)


# ==================== DECODING ====================

_DECODERS: dict[str, Callable[[ByteCursor, ConstantPool], Attribute]] = {}


def _decoder(kind: type[Attribute]):
    def register(func):
        _DECODERS[kind.name] = func
        return func
    return register


def known_attribute_names() -> frozenset[str]:
    return frozenset(_DECODERS)


def read_attributes(cursor: ByteCursor, pool: ConstantPool) -> tuple[Attribute, ...]:
    """Read attributes_count and that many attributes."""
    with error_context("attributes_count", cursor.offset):
        count = cursor.read_u2()
    attributes = []
    for i in range(count):
        start = cursor.offset
        try:
            attributes.append(read_attribute(cursor, pool))
        except ClassFormatError as exc:
            exc.add_context(f"attributes[{i}]", start)
            raise
    return tuple(attributes)


def read_attribute(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    """Read one attribute header and body."""
    start = cursor.offset
    name_index = cursor.read_u2()
    length = cursor.read_u4()
    name = pool.get_utf8(name_index)
    body = cursor.sub_cursor(length)

    decode = _DECODERS.get(name)
    if decode is None:
        logger.debug("Keeping unrecognized attribute %r (%s bytes) at offset %s", name, length, start)
        return UnrecognizedAttribute(name, body.read_bytes(length))

    try:
        attribute = decode(body, pool)
    except UnexpectedEofError as exc:
        err = AttributeLengthMismatchError(
            f"{name} attribute needs more than its declared {length} bytes", offset=exc.offset)
        err.add_context(name)
        raise err from exc
    except ClassFormatError as exc:
        exc.add_context(name)
        raise
    if not body.at_end:
        err = AttributeLengthMismatchError(
            f"{name} attribute declared {length} bytes but its contents used {body.position}",
            offset=body.offset)
        err.add_context(name)
        raise err
    return attribute


def _read_u2_table(cursor: ByteCursor) -> tuple[int, ...]:
    count = cursor.read_u2()
    return tuple(cursor.read_u2() for _ in range(count))


@_decoder(ConstantValueAttribute)
def _read_constant_value(cursor: ByteCursor, pool: ConstantPool) -> ConstantValueAttribute:
    return ConstantValueAttribute(cursor.read_u2())


@_decoder(CodeAttribute)
def _read_code(cursor: ByteCursor, pool: ConstantPool) -> CodeAttribute:
    max_stack = cursor.read_u2()
    max_locals = cursor.read_u2()
    code_length = cursor.read_u4()
    code_start = cursor.offset
    code = cursor.read_bytes(code_length)
    try:
        instructions = decode_instructions(code, base=code_start)
    except ClassFormatError as exc:
        exc.add_context("code")
        raise

    exception_table_length = cursor.read_u2()
    exception_table = []
    for _ in range(exception_table_length):
        start_pc = cursor.read_u2()
        end_pc = cursor.read_u2()
        handler_pc = cursor.read_u2()
        catch_type = cursor.read_u2()
        exception_table.append(ExceptionTableEntry(start_pc, end_pc, handler_pc, catch_type))

    attributes = read_attributes(cursor, pool)
    return CodeAttribute(
        max_stack=max_stack,
        max_locals=max_locals,
        code=code,
        instructions=instructions,
        exception_table=tuple(exception_table),
        attributes=attributes,
    )


def _read_verification_type(cursor: ByteCursor) -> VerificationTypeInfo:
    offset = cursor.offset
    tag = cursor.read_u1()
    if tag == VerificationType.OBJECT or tag == VerificationType.UNINITIALIZED:
        return VerificationTypeInfo(VerificationType(tag), cursor.read_u2())
    if tag < VerificationType.OBJECT:
        return VerificationTypeInfo(VerificationType(tag))
    raise InvalidAttributeError(f"Unknown verification type tag: {tag}", offset=offset)


@_decoder(StackMapTableAttribute)
def _read_stack_map_table(cursor: ByteCursor, pool: ConstantPool) -> StackMapTableAttribute:
    number_of_entries = cursor.read_u2()
    entries = []
    for _ in range(number_of_entries):
        offset = cursor.offset
        frame_type = cursor.read_u1()

        if frame_type <= 63:
            frame = StackMapFrame(frame_type, frame_type)
        elif frame_type <= 127:
            stack = (_read_verification_type(cursor),)
            frame = StackMapFrame(frame_type, frame_type - 64, stack=stack)
        elif frame_type <= 246:
            raise InvalidAttributeError(f"Reserved stack map frame type: {frame_type}", offset=offset)
        elif frame_type == 247:
            offset_delta = cursor.read_u2()
            stack = (_read_verification_type(cursor),)
            frame = StackMapFrame(frame_type, offset_delta, stack=stack)
        elif frame_type <= 251:
            # chop frames and same_frame_extended
            frame = StackMapFrame(frame_type, cursor.read_u2())
        elif frame_type <= 254:
            offset_delta = cursor.read_u2()
            local_vars = tuple(_read_verification_type(cursor) for _ in range(frame_type - 251))
            frame = StackMapFrame(frame_type, offset_delta, locals=local_vars)
        else:
            offset_delta = cursor.read_u2()
            number_of_locals = cursor.read_u2()
            local_vars = tuple(_read_verification_type(cursor) for _ in range(number_of_locals))
            number_of_stack_items = cursor.read_u2()
            stack = tuple(_read_verification_type(cursor) for _ in range(number_of_stack_items))
            frame = StackMapFrame(frame_type, offset_delta, locals=local_vars, stack=stack)
        entries.append(frame)
    return StackMapTableAttribute(tuple(entries))


@_decoder(ExceptionsAttribute)
def _read_exceptions(cursor: ByteCursor, pool: ConstantPool) -> ExceptionsAttribute:
    return ExceptionsAttribute(_read_u2_table(cursor))


@_decoder(InnerClassesAttribute)
def _read_inner_classes(cursor: ByteCursor, pool: ConstantPool) -> InnerClassesAttribute:
    num_classes = cursor.read_u2()
    classes = []
    for _ in range(num_classes):
        inner_class_idx = cursor.read_u2()
        outer_class_idx = cursor.read_u2()
        inner_name_idx = cursor.read_u2()
        inner_access = cursor.read_u2()
        classes.append(InnerClassEntry(inner_class_idx, outer_class_idx, inner_name_idx, inner_access))
    return InnerClassesAttribute(tuple(classes))


@_decoder(EnclosingMethodAttribute)
def _read_enclosing_method(cursor: ByteCursor, pool: ConstantPool) -> EnclosingMethodAttribute:
    class_index = cursor.read_u2()
    return EnclosingMethodAttribute(class_index, cursor.read_u2())


@_decoder(SyntheticAttribute)
def _read_synthetic(cursor: ByteCursor, pool: ConstantPool) -> SyntheticAttribute:
    return SyntheticAttribute()


@_decoder(DeprecatedAttribute)
def _read_deprecated(cursor: ByteCursor, pool: ConstantPool) -> DeprecatedAttribute:
    return DeprecatedAttribute()


@_decoder(SignatureAttribute)
def _read_signature(cursor: ByteCursor, pool: ConstantPool) -> SignatureAttribute:
    return SignatureAttribute(cursor.read_u2())


@_decoder(SourceFileAttribute)
def _read_source_file(cursor: ByteCursor, pool: ConstantPool) -> SourceFileAttribute:
    return SourceFileAttribute(cursor.read_u2())


@_decoder(SourceDebugExtensionAttribute)
def _read_source_debug_extension(cursor: ByteCursor, pool: ConstantPool) -> SourceDebugExtensionAttribute:
    return SourceDebugExtensionAttribute(cursor.read_bytes(cursor.remaining))


@_decoder(LineNumberTableAttribute)
def _read_line_number_table(cursor: ByteCursor, pool: ConstantPool) -> LineNumberTableAttribute:
    length = cursor.read_u2()
    table = []
    for _ in range(length):
        start_pc = cursor.read_u2()
        table.append(LineNumberEntry(start_pc, cursor.read_u2()))
    return LineNumberTableAttribute(tuple(table))


def _read_local_variables(cursor: ByteCursor) -> tuple[LocalVariableEntry, ...]:
    length = cursor.read_u2()
    table = []
    for _ in range(length):
        start_pc = cursor.read_u2()
        var_length = cursor.read_u2()
        name_index = cursor.read_u2()
        descriptor_index = cursor.read_u2()
        index = cursor.read_u2()
        table.append(LocalVariableEntry(start_pc, var_length, name_index, descriptor_index, index))
    return tuple(table)


@_decoder(LocalVariableTableAttribute)
def _read_local_variable_table(cursor: ByteCursor, pool: ConstantPool) -> LocalVariableTableAttribute:
    return LocalVariableTableAttribute(_read_local_variables(cursor))


@_decoder(LocalVariableTypeTableAttribute)
def _read_local_variable_type_table(cursor: ByteCursor, pool: ConstantPool) -> LocalVariableTypeTableAttribute:
    return LocalVariableTypeTableAttribute(_read_local_variables(cursor))


def _read_annotation(cursor: ByteCursor) -> Annotation:
    """Read a single annotation."""
    type_idx = cursor.read_u2()
    num_pairs = cursor.read_u2()
    pairs = []
    for _ in range(num_pairs):
        name_idx = cursor.read_u2()
        pairs.append((name_idx, _read_element_value(cursor)))
    return Annotation(type_idx, tuple(pairs))


def _read_element_value(cursor: ByteCursor) -> ElementValue:
    """Read an annotation element value."""
    offset = cursor.offset
    tag = chr(cursor.read_u1())

    if tag in "BCDFIJSZs":
        # Constant value
        return ElementValue(tag, cursor.read_u2())

    elif tag == "e":
        # Enum constant
        type_idx = cursor.read_u2()
        const_idx = cursor.read_u2()
        return ElementValue(tag, (type_idx, const_idx))

    elif tag == "c":
        # Class
        return ElementValue(tag, cursor.read_u2())

    elif tag == "@":
        # Nested annotation
        return ElementValue(tag, _read_annotation(cursor))

    elif tag == "[":
        # Array
        num_values = cursor.read_u2()
        return ElementValue(tag, tuple(_read_element_value(cursor) for _ in range(num_values)))

    raise InvalidAttributeError(f"Unknown annotation element value tag: {tag!r}", offset=offset)


def _read_annotations(cursor: ByteCursor) -> tuple[Annotation, ...]:
    num_annotations = cursor.read_u2()
    return tuple(_read_annotation(cursor) for _ in range(num_annotations))


@_decoder(RuntimeVisibleAnnotationsAttribute)
def _read_visible_annotations(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    return RuntimeVisibleAnnotationsAttribute(_read_annotations(cursor))


@_decoder(RuntimeInvisibleAnnotationsAttribute)
def _read_invisible_annotations(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    return RuntimeInvisibleAnnotationsAttribute(_read_annotations(cursor))


def _read_parameter_annotations(cursor: ByteCursor) -> tuple[tuple[Annotation, ...], ...]:
    num_parameters = cursor.read_u1()
    return tuple(_read_annotations(cursor) for _ in range(num_parameters))


@_decoder(RuntimeVisibleParameterAnnotationsAttribute)
def _read_visible_parameter_annotations(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    return RuntimeVisibleParameterAnnotationsAttribute(_read_parameter_annotations(cursor))


@_decoder(RuntimeInvisibleParameterAnnotationsAttribute)
def _read_invisible_parameter_annotations(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    return RuntimeInvisibleParameterAnnotationsAttribute(_read_parameter_annotations(cursor))


def _read_type_annotation(cursor: ByteCursor) -> TypeAnnotation:
    offset = cursor.offset
    target_type = cursor.read_u1()

    if target_type in (0x00, 0x01, 0x16):
        # type parameter / formal parameter
        target_info = (cursor.read_u1(),)
    elif target_type in (0x10, 0x17, 0x42):
        # supertype / throws / catch
        target_info = (cursor.read_u2(),)
    elif target_type in (0x11, 0x12):
        type_parameter_index = cursor.read_u1()
        target_info = (type_parameter_index, cursor.read_u1())
    elif 0x13 <= target_type <= 0x15:
        target_info = ()
    elif target_type in (0x40, 0x41):
        table_length = cursor.read_u2()
        table = []
        for _ in range(table_length):
            start_pc = cursor.read_u2()
            length = cursor.read_u2()
            table.append((start_pc, length, cursor.read_u2()))
        target_info = tuple(table)
    elif 0x43 <= target_type <= 0x46:
        target_info = (cursor.read_u2(),)
    elif 0x47 <= target_type <= 0x4B:
        code_offset = cursor.read_u2()
        target_info = (code_offset, cursor.read_u1())
    else:
        raise InvalidAttributeError(f"Unknown type annotation target type: 0x{target_type:02X}",
                                    offset=offset)

    path_length = cursor.read_u1()
    path = []
    for _ in range(path_length):
        type_path_kind = cursor.read_u1()
        path.append((type_path_kind, cursor.read_u1()))

    return TypeAnnotation(target_type, target_info, tuple(path), _read_annotation(cursor))


def _read_type_annotations(cursor: ByteCursor) -> tuple[TypeAnnotation, ...]:
    num_annotations = cursor.read_u2()
    return tuple(_read_type_annotation(cursor) for _ in range(num_annotations))


@_decoder(RuntimeVisibleTypeAnnotationsAttribute)
def _read_visible_type_annotations(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    return RuntimeVisibleTypeAnnotationsAttribute(_read_type_annotations(cursor))


@_decoder(RuntimeInvisibleTypeAnnotationsAttribute)
def _read_invisible_type_annotations(cursor: ByteCursor, pool: ConstantPool) -> Attribute:
    return RuntimeInvisibleTypeAnnotationsAttribute(_read_type_annotations(cursor))


@_decoder(AnnotationDefaultAttribute)
def _read_annotation_default(cursor: ByteCursor, pool: ConstantPool) -> AnnotationDefaultAttribute:
    return AnnotationDefaultAttribute(_read_element_value(cursor))


@_decoder(BootstrapMethodsAttribute)
def _read_bootstrap_methods(cursor: ByteCursor, pool: ConstantPool) -> BootstrapMethodsAttribute:
    num_bootstrap_methods = cursor.read_u2()
    methods = []
    for _ in range(num_bootstrap_methods):
        method_ref = cursor.read_u2()
        methods.append(BootstrapMethod(method_ref, _read_u2_table(cursor)))
    return BootstrapMethodsAttribute(tuple(methods))


@_decoder(MethodParametersAttribute)
def _read_method_parameters(cursor: ByteCursor, pool: ConstantPool) -> MethodParametersAttribute:
    parameters_count = cursor.read_u1()
    parameters = []
    for _ in range(parameters_count):
        name_index = cursor.read_u2()
        parameters.append(MethodParameter(name_index, cursor.read_u2()))
    return MethodParametersAttribute(tuple(parameters))


def _read_module_exports(cursor: ByteCursor) -> tuple[ModuleExports, ...]:
    count = cursor.read_u2()
    directives = []
    for _ in range(count):
        index = cursor.read_u2()
        flags = cursor.read_u2()
        directives.append(ModuleExports(index, flags, _read_u2_table(cursor)))
    return tuple(directives)


@_decoder(ModuleAttribute)
def _read_module(cursor: ByteCursor, pool: ConstantPool) -> ModuleAttribute:
    module_name_index = cursor.read_u2()
    module_flags = cursor.read_u2()
    module_version_index = cursor.read_u2()

    requires_count = cursor.read_u2()
    requires = []
    for _ in range(requires_count):
        requires_index = cursor.read_u2()
        requires_flags = cursor.read_u2()
        requires.append(ModuleRequires(requires_index, requires_flags, cursor.read_u2()))

    exports = _read_module_exports(cursor)
    opens = _read_module_exports(cursor)
    uses_index = _read_u2_table(cursor)

    provides_count = cursor.read_u2()
    provides = []
    for _ in range(provides_count):
        provides_index = cursor.read_u2()
        provides.append(ModuleProvides(provides_index, _read_u2_table(cursor)))

    return ModuleAttribute(
        module_name_index=module_name_index,
        module_flags=module_flags,
        module_version_index=module_version_index,
        requires=tuple(requires),
        exports=exports,
        opens=opens,
        uses_index=uses_index,
        provides=tuple(provides),
    )


@_decoder(ModulePackagesAttribute)
def _read_module_packages(cursor: ByteCursor, pool: ConstantPool) -> ModulePackagesAttribute:
    return ModulePackagesAttribute(_read_u2_table(cursor))


@_decoder(ModuleMainClassAttribute)
def _read_module_main_class(cursor: ByteCursor, pool: ConstantPool) -> ModuleMainClassAttribute:
    return ModuleMainClassAttribute(cursor.read_u2())


@_decoder(NestHostAttribute)
def _read_nest_host(cursor: ByteCursor, pool: ConstantPool) -> NestHostAttribute:
    return NestHostAttribute(cursor.read_u2())


@_decoder(NestMembersAttribute)
def _read_nest_members(cursor: ByteCursor, pool: ConstantPool) -> NestMembersAttribute:
    return NestMembersAttribute(_read_u2_table(cursor))


@_decoder(RecordAttribute)
def _read_record(cursor: ByteCursor, pool: ConstantPool) -> RecordAttribute:
    components_count = cursor.read_u2()
    components = []
    for i in range(components_count):
        name_index = cursor.read_u2()
        descriptor_index = cursor.read_u2()
        try:
            attributes = read_attributes(cursor, pool)
        except ClassFormatError as exc:
            exc.add_context(f"components[{i}]")
            raise
        components.append(RecordComponent(name_index, descriptor_index, attributes))
    return RecordAttribute(tuple(components))


@_decoder(PermittedSubclassesAttribute)
def _read_permitted_subclasses(cursor: ByteCursor, pool: ConstantPool) -> PermittedSubclassesAttribute:
    return PermittedSubclassesAttribute(_read_u2_table(cursor))
