import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from classbuilder import ClassBuilder  # noqa: E402


@pytest.fixture
def builder():
    return ClassBuilder()


@pytest.fixture
def hello_class():
    """A class with a constant field, a constructor and a main method."""
    b = ClassBuilder(name="org/example/Hello")
    b.add_interface("java/lang/Runnable")
    b.add_field("GREETING", "Ljava/lang/String;", access=0x0019,
                attributes=[b.attribute("ConstantValue", b.pool.string("hi").to_bytes(2, "big"))])
    init_ref = b.pool.methodref("java/lang/Object", "<init>", "()V")
    b.add_method("<init>", "()V", code=bytes([
        0x2A,  # aload_0
        0xB7, *init_ref.to_bytes(2, "big"),  # invokespecial
        0xB1,  # return
    ]))
    out_ref = b.pool.fieldref("java/lang/System", "out", "Ljava/io/PrintStream;")
    msg = b.pool.string("Hello")
    println = b.pool.methodref("java/io/PrintStream", "println", "(Ljava/lang/String;)V")
    b.add_method("main", "([Ljava/lang/String;)V", access=0x0009, code=bytes([
        0xB2, *out_ref.to_bytes(2, "big"),  # getstatic
        0x12, msg,  # ldc
        0xB6, *println.to_bytes(2, "big"),  # invokevirtual
        0xB1,  # return
    ]))
    b.add_method("run", "()V", access=0x0401)
    b.add_attribute("SourceFile", b.pool.utf8("Hello.java").to_bytes(2, "big"))
    return b.build()
