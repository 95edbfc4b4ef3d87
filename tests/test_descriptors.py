"""Tests for the descriptor parser."""

import pytest

from pyjcf.descriptors import (
    ArrayType,
    BaseType,
    MethodDescriptor,
    ObjectType,
    VOID,
    DescriptorParser,
    parse_field_descriptor,
    parse_method_descriptor,
)
from pyjcf.errors import DescriptorError


@pytest.fixture
def parser():
    return DescriptorParser()


class TestFieldDescriptors:
    def test_base_types(self, parser):
        for code, name in [("B", "byte"), ("C", "char"), ("D", "double"), ("F", "float"),
                           ("I", "int"), ("J", "long"), ("S", "short"), ("Z", "boolean")]:
            ty = parser.parse_field(code)
            assert ty == BaseType(code)
            assert ty.name == name

    def test_object_type(self):
        ty = parse_field_descriptor("Ljava/lang/String;")
        assert ty == ObjectType("java/lang/String")
        assert ty.name == "java.lang.String"
        assert ty.descriptor == "Ljava/lang/String;"

    def test_array_dimensions_are_flattened(self):
        ty = parse_field_descriptor("[[I")
        assert ty == ArrayType(BaseType("I"), 2)
        assert ty.name == "int[][]"
        assert ty.descriptor == "[[I"

    def test_object_array(self):
        ty = parse_field_descriptor("[Ljava/util/Map$Entry;")
        assert ty.element == ObjectType("java/util/Map$Entry")
        assert ty.dimensions == 1

    def test_slots(self):
        assert parse_field_descriptor("J").slots == 2
        assert parse_field_descriptor("D").slots == 2
        assert parse_field_descriptor("[J").slots == 1
        assert parse_field_descriptor("Ljava/lang/Object;").slots == 1

    @pytest.mark.parametrize("text", ["", "V", "II", "L;", "Ljava/lang/String", "Ljava.lang.String;", "[", "X"])
    def test_invalid(self, text):
        with pytest.raises(DescriptorError):
            parse_field_descriptor(text)

    def test_too_many_dimensions(self):
        with pytest.raises(DescriptorError):
            parse_field_descriptor("[" * 256 + "I")
        assert parse_field_descriptor("[" * 255 + "I").dimensions == 255


class TestMethodDescriptors:
    def test_no_args_void(self):
        md = parse_method_descriptor("()V")
        assert md == MethodDescriptor((), VOID)
        assert md.return_type.name == "void"

    def test_mixed_parameters(self, parser):
        md = parser.parse_method("(IJLjava/lang/String;[[D)Ljava/lang/Object;")
        assert md.parameter_types == (
            BaseType("I"),
            BaseType("J"),
            ObjectType("java/lang/String"),
            ArrayType(BaseType("D"), 2),
        )
        assert md.return_type == ObjectType("java/lang/Object")
        assert md.parameter_slots == 5
        assert md.descriptor == "(IJLjava/lang/String;[[D)Ljava/lang/Object;"

    def test_str(self):
        assert str(parse_method_descriptor("(I[Ljava/lang/String;)Z")) == "boolean (int, java.lang.String[])"

    @pytest.mark.parametrize("text", ["", "V", "(V)V", "()", "(I", "()VV", "I()V", "([)V"])
    def test_invalid(self, text):
        with pytest.raises(DescriptorError):
            parse_method_descriptor(text)

    def test_descriptor_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_method_descriptor("nope")
