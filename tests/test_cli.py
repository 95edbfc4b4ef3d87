"""Tests for the pyjcf command line tool."""

import zipfile

import pytest

from classbuilder import MINIMAL_CLASS
from pyjcf.cli import main


@pytest.fixture
def hello_path(tmp_path, hello_class):
    path = tmp_path / "Hello.class"
    path.write_bytes(hello_class)
    return path


@pytest.fixture
def hello_jar(tmp_path, hello_class):
    path = tmp_path / "app.jar"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("org/example/Hello.class", hello_class)
    return path


class TestInfo:
    def test_summary(self, hello_path, capsys):
        main(["info", str(hello_path)])
        out = capsys.readouterr().out
        assert "version 52.0" in out
        assert "source: Hello.java" in out
        assert "public class org/example/Hello extends java/lang/Object implements java/lang/Runnable" in out
        assert "public static final java.lang.String GREETING" in out
        assert "= 'hi'" in out
        assert "public static void main(java.lang.String[])" in out
        assert "public abstract void run()" in out

    def test_from_jar(self, hello_jar, capsys):
        main(["info", f"{hello_jar}!org/example/Hello.class"])
        assert "org/example/Hello" in capsys.readouterr().out

    def test_missing_jar_member(self, hello_jar, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["info", f"{hello_jar}!org/example/Missing.class"])
        assert exc_info.value.code == 1
        assert "Cannot read" in capsys.readouterr().err


class TestDisasm:
    def test_instructions(self, hello_path, capsys):
        main(["disasm", str(hello_path)])
        out = capsys.readouterr().out
        assert "class org/example/Hello" in out
        assert "main([Ljava/lang/String;)V" in out
        assert "0: getstatic" in out
        assert "java/lang/System.out:Ljava/io/PrintStream;" in out
        assert "// Hello" in out
        assert "(no code)" in out


class TestPool:
    def test_dump(self, hello_path, capsys):
        main(["pool", str(hello_path)])
        out = capsys.readouterr().out
        assert "UTF8" in out
        assert "org/example/Hello" in out
        assert "METHODREF" in out

    def test_empty_pool(self, tmp_path, capsys):
        path = tmp_path / "Empty.class"
        path.write_bytes(MINIMAL_CLASS)
        main(["pool", str(path)])
        assert "0 constant pool slots" in capsys.readouterr().out


class TestErrors:
    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["info", str(tmp_path / "Nope.class")])
        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_decode_error(self, tmp_path, capsys):
        path = tmp_path / "Bad.class"
        path.write_bytes(MINIMAL_CLASS[:-3])
        with pytest.raises(SystemExit):
            main(["disasm", str(path)])
        err = capsys.readouterr().err
        assert "Error decoding" in err
        assert "at offset" in err

    def test_verbose_hexdump(self, tmp_path, capsys):
        path = tmp_path / "Bad.class"
        path.write_bytes(b"\xDE\xAD\xBE\xEF" + MINIMAL_CLASS[4:])
        with pytest.raises(SystemExit):
            main(["-v", "pool", str(path)])
        err = capsys.readouterr().err
        assert "context around offset 0" in err
        assert "de ad be ef" in err

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
