"""Tests for top-level class file decoding."""

import logging

import pytest

from classbuilder import MINIMAL_CLASS, ClassBuilder, u2
from pyjcf import decode_class, read_class_file
from pyjcf.attributes import ConstantValueAttribute, SourceFileAttribute
from pyjcf.classfile import AccessFlags
from pyjcf.errors import (
    AttributeLengthMismatchError,
    ClassFormatError,
    InvalidMagicError,
    UnexpectedEofError,
)
from pyjcf.opcodes import Opcode


class TestMinimalClass:
    def test_decodes(self):
        cf = decode_class(MINIMAL_CLASS)
        assert cf.magic == 0xCAFEBABE
        assert cf.version == (52, 0)
        assert len(cf.constant_pool) == 1
        assert cf.super_class == 0
        assert cf.super_name is None
        assert cf.interfaces == ()
        assert cf.fields == ()
        assert cf.methods == ()
        assert cf.attributes == ()
        assert cf.access_flags & AccessFlags.PUBLIC

    def test_every_truncation_is_eof(self):
        for end in range(len(MINIMAL_CLASS)):
            with pytest.raises(UnexpectedEofError):
                decode_class(MINIMAL_CLASS[:end])

    def test_accepts_memoryview(self):
        assert decode_class(memoryview(MINIMAL_CLASS)).methods == ()


class TestHeader:
    def test_bad_magic(self):
        with pytest.raises(InvalidMagicError) as exc_info:
            decode_class(b"\xCA\xFE\xBA\xBF" + MINIMAL_CLASS[4:])
        assert exc_info.value.offset == 0
        assert exc_info.value.loc == ["magic"]

    def test_bad_magic_is_a_class_format_error(self):
        with pytest.raises(ClassFormatError):
            decode_class(b"PK\x03\x04" + b"\x00" * 20)

    def test_unknown_versions_are_recorded(self):
        cf = decode_class(ClassBuilder(major=99, minor=65535).build())
        assert cf.major_version == 99
        assert cf.minor_version == 65535

    def test_trailing_bytes_are_ignored(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="pyjcf"):
            cf = decode_class(MINIMAL_CLASS + b"\x00\x01\x02")
        assert cf.methods == ()
        assert "3 trailing bytes" in caplog.text


class TestMembers:
    def test_counts_match(self, hello_class):
        cf = decode_class(hello_class)
        assert cf.name == "org/example/Hello"
        assert cf.super_name == "java/lang/Object"
        assert len(cf.interfaces) == 1
        assert cf.constant_pool.get_class_name(cf.interfaces[0]) == "java/lang/Runnable"
        assert len(cf.fields) == 1
        assert len(cf.methods) == 3
        assert len(cf.attributes) == 1

    def test_field(self, hello_class):
        cf = decode_class(hello_class)
        pool = cf.constant_pool
        (field,) = cf.fields
        assert pool.get_utf8(field.name_index) == "GREETING"
        assert pool.get_utf8(field.descriptor_index) == "Ljava/lang/String;"
        assert field.access_flags == AccessFlags.PUBLIC | AccessFlags.STATIC | AccessFlags.FINAL
        const = field.get_attribute(ConstantValueAttribute)
        assert pool.get_string(const.constantvalue_index) == "hi"

    def test_methods_and_code(self, hello_class):
        cf = decode_class(hello_class)
        pool = cf.constant_pool
        init, main, run = cf.methods
        assert pool.get_utf8(init.name_index) == "<init>"
        assert [i.opcode for i in init.code.instructions] == [
            Opcode.ALOAD_0, Opcode.INVOKESPECIAL, Opcode.RETURN]
        ref = pool.get_methodref(init.code.instructions[1].operands[0])
        assert pool.get_class_name(ref.class_index) == "java/lang/Object"

        ldc = main.code.instructions[1]
        assert ldc.opcode == Opcode.LDC
        assert pool.text_of(ldc.operands[0]) == "Hello"
        assert pool.text_of(main.code.instructions[2].operands[0]) == \
            "java/io/PrintStream.println:(Ljava/lang/String;)V"

        assert run.code is None
        assert run.access_flags & AccessFlags.ABSTRACT

    def test_class_attribute(self, hello_class):
        cf = decode_class(hello_class)
        source = cf.get_attribute(SourceFileAttribute)
        assert cf.constant_pool.get_utf8(source.sourcefile_index) == "Hello.java"

    def test_every_truncation_is_eof(self, hello_class):
        for end in range(len(hello_class)):
            with pytest.raises(UnexpectedEofError):
                decode_class(hello_class[:end])


class TestErrorContext:
    def test_method_attribute_location(self, builder):
        builder.add_method("a", "()V")
        builder.add_method("b", "()V", attributes=[builder.attribute("Signature", u2(1) + b"\x00")])
        with pytest.raises(AttributeLengthMismatchError) as exc_info:
            decode_class(builder.build())
        err = exc_info.value
        assert err.loc == ["methods[1]", "attributes[0]", "Signature"]
        assert "in methods[1].attributes[0].Signature" in str(err)
        assert f"at offset {err.offset}" in str(err)

    def test_field_attribute_location(self, builder):
        builder.add_field("x", "I", attributes=[builder.attribute("ConstantValue", b"", length=40)])
        with pytest.raises(UnexpectedEofError) as exc_info:
            decode_class(builder.build())
        assert exc_info.value.loc[0] == "fields[0]"

    def test_truncated_interface_location(self, builder):
        builder.add_interface("java/lang/Runnable")
        data = builder.build()
        # interface index, then empty fields, methods and attributes
        index_offset = len(data) - 8
        with pytest.raises(UnexpectedEofError) as exc_info:
            decode_class(data[:index_offset + 1])
        assert exc_info.value.loc == ["interfaces[0]"]
        assert exc_info.value.offset == index_offset

    @pytest.mark.parametrize("end, section", [
        (2, "magic"),
        (6, "version"),
        (9, "constant_pool_count"),
        (11, "access_flags"),
        (13, "this_class"),
        (15, "super_class"),
        (17, "interfaces_count"),
        (19, "fields_count"),
        (21, "methods_count"),
        (23, "attributes_count"),
    ])
    def test_header_sections_are_named(self, end, section):
        with pytest.raises(UnexpectedEofError) as exc_info:
            decode_class(MINIMAL_CLASS[:end])
        assert exc_info.value.loc == [section]

    def test_every_truncation_has_a_location(self, hello_class):
        for end in range(len(hello_class)):
            with pytest.raises(UnexpectedEofError) as exc_info:
                decode_class(hello_class[:end])
            assert exc_info.value.loc

class TestReadClassFile:
    def test_reads_from_disk(self, tmp_path, hello_class):
        path = tmp_path / "Hello.class"
        path.write_bytes(hello_class)
        assert read_class_file(path).name == "org/example/Hello"
        assert read_class_file(str(path)).name == "org/example/Hello"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_class_file(tmp_path / "Missing.class")
