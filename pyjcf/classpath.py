"""
Reading class file bytes from disk or from a jar archive member.
"""

import logging
import zipfile
from pathlib import Path

logger = logging.getLogger("pyjcf.classpath")

JAR_SEPARATOR = "!"


def load_class_bytes(spec: str) -> bytes:
    """Read class file bytes from a path or from `archive.jar!member/Name.class`.

    Raises FileNotFoundError if the file or archive member does not exist.
    """
    if JAR_SEPARATOR in spec:
        archive, member = spec.split(JAR_SEPARATOR, 1)
        logger.debug("Reading %s from %s", member, archive)
        with zipfile.ZipFile(archive, "r") as zf:
            try:
                return zf.read(member.lstrip("/"))
            except KeyError:
                raise FileNotFoundError(f"{member} not found in {archive}") from None
    return Path(spec).read_bytes()
