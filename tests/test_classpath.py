"""Tests for reading class bytes from files and jars."""

import zipfile

import pytest

from pyjcf.classpath import load_class_bytes


@pytest.fixture
def class_dir(tmp_path, hello_class):
    root = tmp_path / "classes"
    (root / "org" / "example").mkdir(parents=True)
    (root / "org" / "example" / "Hello.class").write_bytes(hello_class)
    return root


@pytest.fixture
def jar(tmp_path, hello_class):
    path = tmp_path / "lib.jar"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("org/example/Hello.class", hello_class)
        zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
    return path


class TestLoadClassBytes:
    def test_plain_file(self, class_dir, hello_class):
        assert load_class_bytes(str(class_dir / "org/example/Hello.class")) == hello_class

    def test_jar_member(self, jar, hello_class):
        assert load_class_bytes(f"{jar}!org/example/Hello.class") == hello_class
        assert load_class_bytes(f"{jar}!/org/example/Hello.class") == hello_class

    def test_missing_member(self, jar):
        with pytest.raises(FileNotFoundError):
            load_class_bytes(f"{jar}!org/example/Nope.class")
