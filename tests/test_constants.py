"""Tests for constant pool decoding and lookup."""

import struct

import pytest

from classbuilder import PoolBuilder, u1, u2
from pyjcf.constants import (
    ConstantClass,
    ConstantMethodHandle,
    ConstantPool,
    ConstantPoolTag,
    ConstantUtf8,
    decode_modified_utf8,
    read_constant_pool,
)
from pyjcf.cursor import ByteCursor
from pyjcf.errors import (
    InvalidConstantPoolIndexError,
    UnexpectedEofError,
    UnknownConstantPoolTagError,
    WrongConstantPoolEntryKindError,
)


def read_pool(pool: PoolBuilder) -> ConstantPool:
    return read_constant_pool(ByteCursor(pool.to_bytes()))


class TestReadConstantPool:
    def test_empty_pool(self):
        pool = read_constant_pool(ByteCursor(u2(1)))
        assert len(pool) == 1
        assert list(pool) == []

    def test_all_simple_kinds(self):
        b = PoolBuilder()
        i = b.integer(-7)
        f = b.float(2.5)
        s = b.string("text")
        c = b.cls("java/lang/Object")
        m = b.methodref("java/lang/Object", "hashCode", "()I")
        pool = read_pool(b)
        assert pool.get_integer(i) == -7
        assert pool.get_float(f) == 2.5
        assert pool.get_string(s) == "text"
        assert pool.get_class_name(c) == "java/lang/Object"
        ref = pool.get_methodref(m)
        assert pool.get_class_name(ref.class_index) == "java/lang/Object"
        nat = pool.get_name_and_type(ref.name_and_type_index)
        assert pool.get_utf8(nat.name_index) == "hashCode"
        assert pool.get_utf8(nat.descriptor_index) == "()I"

    def test_long_and_double_take_two_slots(self):
        b = PoolBuilder()
        lng = b.long(2 ** 40)
        dbl = b.double(-1.5)
        after = b.utf8("after")
        pool = read_pool(b)
        assert (lng, dbl, after) == (1, 3, 5)
        assert len(pool) == 6
        assert pool.get_long(lng) == 2 ** 40
        assert pool.get_double(dbl) == -1.5
        assert pool.get_utf8(after) == "after"

    def test_phantom_slot_is_invalid(self):
        b = PoolBuilder()
        b.long(1)
        b.utf8("x")
        pool = read_pool(b)
        with pytest.raises(InvalidConstantPoolIndexError):
            pool.get(2)
        assert [idx for idx, _ in pool] == [1, 3]

    def test_newer_kinds(self):
        b = PoolBuilder()
        mod_name = b.utf8("java.base")
        pkg_name = b.utf8("java/lang")
        nat = b.name_and_type("apply", "()Ljava/lang/Object;")
        mref = b.methodref("Boot", "bsm", "()V")
        handle = b.raw(u1(15) + u1(6) + u2(mref))
        mtype = b.raw(u1(16) + u2(b.utf8("()V")))
        dyn = b.raw(u1(17) + u2(0) + u2(nat))
        indy = b.raw(u1(18) + u2(1) + u2(nat))
        mod = b.raw(u1(19) + u2(mod_name))
        pkg = b.raw(u1(20) + u2(pkg_name))
        pool = read_pool(b)

        assert pool.get_method_handle(handle) == ConstantMethodHandle(6, mref)
        assert pool.get_utf8(pool.get_method_type(mtype).descriptor_index) == "()V"
        assert pool.get_dynamic(dyn).bootstrap_method_attr_index == 0
        assert pool.get_invoke_dynamic(indy).bootstrap_method_attr_index == 1
        assert pool.get_utf8(pool.get_module(mod).name_index) == "java.base"
        assert pool.get_utf8(pool.get_package(pkg).name_index) == "java/lang"
        assert pool.text_of(handle) == "INVOKE_STATIC Boot.bsm:()V"
        assert pool.text_of(indy) == "#1:apply:()Ljava/lang/Object;"

    def test_unknown_tag(self):
        b = PoolBuilder()
        b.utf8("ok")
        b.raw(u1(2) + u2(0))
        with pytest.raises(UnknownConstantPoolTagError) as exc_info:
            read_pool(b)
        err = exc_info.value
        assert err.loc == ["constant_pool[2]"]
        # count (2) + utf8 entry (1 + 2 + 2)
        assert err.offset == 7

    def test_truncated_entry(self):
        data = u2(2) + u1(3) + b"\x00\x00"
        with pytest.raises(UnexpectedEofError):
            read_constant_pool(ByteCursor(data))

    def test_truncated_count(self):
        with pytest.raises(UnexpectedEofError) as exc_info:
            read_constant_pool(ByteCursor(b"\x00"))
        assert exc_info.value.loc == ["constant_pool_count"]
        assert exc_info.value.offset == 0

    def test_trailing_long_overruns_count(self):
        data = u2(2) + u1(5) + b"\x00" * 8
        pool = read_constant_pool(ByteCursor(data))
        assert len(pool) == 3
        assert [idx for idx, _ in pool] == [1]

    def test_pool_cannot_be_extended(self):
        pool = read_pool(PoolBuilder())
        assert not hasattr(pool, "append")

    def test_references_are_not_checked_eagerly(self):
        b = PoolBuilder()
        dangling = b.raw(u1(7) + u2(99))
        pool = read_pool(b)
        assert pool.get_class(dangling) == ConstantClass(99)
        with pytest.raises(InvalidConstantPoolIndexError):
            pool.get_class_name(dangling)


class TestLookup:
    @pytest.fixture
    def pool(self):
        b = PoolBuilder()
        b.utf8("name")
        b.integer(3)
        return read_pool(b)

    def test_index_zero(self, pool):
        with pytest.raises(InvalidConstantPoolIndexError):
            pool.get(0)

    def test_out_of_range(self, pool):
        with pytest.raises(InvalidConstantPoolIndexError):
            pool.get_utf8(3)

    def test_wrong_kind(self, pool):
        with pytest.raises(WrongConstantPoolEntryKindError):
            pool.get_utf8(2)
        with pytest.raises(WrongConstantPoolEntryKindError):
            pool.get_class(1)
        with pytest.raises(WrongConstantPoolEntryKindError):
            pool.get_member_ref(1)

    def test_get_returns_entry(self, pool):
        entry = pool.get(1)
        assert entry == ConstantUtf8("name")
        assert entry.tag == ConstantPoolTag.UTF8

    def test_text_of(self, pool):
        assert pool.text_of(1) == "name"
        assert pool.text_of(2) == "3"


class TestModifiedUtf8:
    def test_ascii(self):
        assert decode_modified_utf8(b"hello") == "hello"

    def test_encoded_nul(self):
        assert decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"

    def test_surrogate_pair(self):
        # U+1F600 as two 3-byte surrogate encodings
        assert decode_modified_utf8(b"\xed\xa0\xbd\xed\xb8\x80") == "\U0001F600"

    def test_two_byte_sequence(self):
        assert decode_modified_utf8("é".encode("utf-8")) == "é"

    def test_malformed_does_not_raise(self):
        assert decode_modified_utf8(b"\xff") == "\ufffd"

    def test_malformed_keeps_encoded_nul(self):
        assert decode_modified_utf8(b"a\xc0\x80b\xff") == "a\x00b\ufffd"

    def test_float_text(self):
        b = PoolBuilder()
        b.raw(u1(4) + struct.pack(">I", 0x7FC00000))
        b.raw(u1(4) + struct.pack(">I", 0xFF800000))
        pool = read_pool(b)
        assert pool.text_of(1) == "NaN"
        assert pool.text_of(2) == "-Infinity"
