"""
Field and method descriptor parser using Lark.

Descriptors are the erased type strings stored in the constant pool, e.g.
``I``, ``[Ljava/lang/String;`` or ``(IJ)V``. Generic signatures are not
handled here.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .errors import DescriptorError


GRAMMAR_FILE = Path(__file__).parent / "descriptors.lark"

MAX_ARRAY_DIMENSIONS = 255


class FieldType:
    """Base class for parsed field types."""

    @property
    def descriptor(self) -> str:
        raise NotImplementedError

    @property
    def name(self) -> str:
        raise NotImplementedError

    @property
    def slots(self) -> int:
        """Local variable slots taken by a value of this type."""
        return 1


@dataclass(frozen=True)
class BaseType(FieldType):
    """Primitive type (B, C, D, F, I, J, S, Z) or void (V)."""
    code: str

    @property
    def descriptor(self) -> str:
        return self.code

    @property
    def name(self) -> str:
        names = {
            "B": "byte", "C": "char", "D": "double", "F": "float",
            "I": "int", "J": "long", "S": "short", "Z": "boolean", "V": "void"
        }
        return names[self.code]

    @property
    def slots(self) -> int:
        if self.code == "V":
            return 0
        return 2 if self.code in "JD" else 1


@dataclass(frozen=True)
class ObjectType(FieldType):
    """Class or interface type, kept in internal form (java/lang/String)."""
    class_name: str

    @property
    def descriptor(self) -> str:
        return f"L{self.class_name};"

    @property
    def name(self) -> str:
        return self.class_name.replace("/", ".")


@dataclass(frozen=True)
class ArrayType(FieldType):
    element: FieldType
    dimensions: int = 1

    @property
    def descriptor(self) -> str:
        return "[" * self.dimensions + self.element.descriptor

    @property
    def name(self) -> str:
        return self.element.name + "[]" * self.dimensions


VOID = BaseType("V")


@dataclass(frozen=True)
class MethodDescriptor:
    parameter_types: tuple[FieldType, ...]
    return_type: FieldType

    @property
    def descriptor(self) -> str:
        params = "".join(p.descriptor for p in self.parameter_types)
        return f"({params}){self.return_type.descriptor}"

    @property
    def parameter_slots(self) -> int:
        """Argument slots, not counting `this`."""
        return sum(p.slots for p in self.parameter_types)

    def __str__(self) -> str:
        params = ", ".join(p.name for p in self.parameter_types)
        return f"{self.return_type.name} ({params})"


class DescriptorTransformer(Transformer):
    """Transforms the Lark parse tree into FieldType / MethodDescriptor."""

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        *params, ret = items
        return MethodDescriptor(tuple(params), ret)

    def base_type(self, items):
        return BaseType(str(items[0]))

    def void_type(self, items):
        return VOID

    def object_type(self, items):
        return ObjectType(str(items[0])[1:-1])

    def array_type(self, items):
        dims, element = items
        return ArrayType(element, len(dims))


class DescriptorParser:
    """Parser for descriptor strings."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(
            grammar,
            parser="lalr",
            start=["field_descriptor", "method_descriptor"],
        )
        self._transformer = DescriptorTransformer()

    def _parse(self, text: str, start: str):
        try:
            tree = self._parser.parse(text, start=start)
        except LarkError as e:
            raise DescriptorError(f"Invalid {start.replace('_', ' ')} {text!r}: {e}") from e
        return self._transformer.transform(tree)

    def parse_field(self, text: str) -> FieldType:
        result = self._parse(text, "field_descriptor")
        _check_dimensions(result, text)
        return result

    def parse_method(self, text: str) -> MethodDescriptor:
        result = self._parse(text, "method_descriptor")
        for param in result.parameter_types:
            _check_dimensions(param, text)
        _check_dimensions(result.return_type, text)
        if result.parameter_slots > 255:
            raise DescriptorError(f"Method descriptor {text!r} needs more than 255 parameter slots")
        return result


def _check_dimensions(ty: FieldType, text: str):
    if isinstance(ty, ArrayType) and ty.dimensions > MAX_ARRAY_DIMENSIONS:
        raise DescriptorError(f"Descriptor {text!r} has more than {MAX_ARRAY_DIMENSIONS} array dimensions")


@lru_cache(maxsize=None)
def _default_parser() -> DescriptorParser:
    return DescriptorParser()


def parse_field_descriptor(text: str) -> FieldType:
    """Parse a field descriptor such as ``[J`` or ``Ljava/util/List;``."""
    return _default_parser().parse_field(text)


def parse_method_descriptor(text: str) -> MethodDescriptor:
    """Parse a method descriptor such as ``(ILjava/lang/String;)V``."""
    return _default_parser().parse_method(text)
