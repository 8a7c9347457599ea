"""File path types and helpers: the only place where mpeak touches the file system."""

from typing import Union
from pathlib import Path
import hashlib

from .exceptions import CannotOpenSource, CannotReadSource

# import and initialize logging
from .logsetup import get_module_logger
logger = get_module_logger(__file__)

StrOrPath = Union[str, Path]


def load_buffer(file: StrOrPath) -> bytes:
    """Read the whole content of `file` into memory.

    Raises
    ------
    CannotOpenSource
        If the file does not exist or can not be opened
    CannotReadSource
        If reading the opened file fails
    """
    file = Path(file)
    logger.trace(f"load_buffer() requested for '{file}'.")
    try:
        f = open(file, 'rb')
    except OSError as e:
        raise CannotOpenSource(f"Can not open '{file}': {e}") from e
    with f:
        try:
            data = f.read()
        except OSError as e:
            raise CannotReadSource(f"Can not read '{file}': {e}") from e
    logger.debug(f"Loaded {len(data)} bytes from '{file}'.")
    return data


def write_buffer(file: StrOrPath, data: bytes) -> Path:
    """Write `data` to `file`, creating missing parent directories."""
    file = Path(file)
    file.parent.mkdir(parents=True, exist_ok=True)
    with open(file, 'wb') as f:
        f.write(data)
    logger.debug(f"Wrote {len(data)} bytes to '{file}'.")
    return file


def file_content_hash(file: StrOrPath) -> str:
    """SHA256 hex digest of the file content."""
    sha256 = hashlib.sha256()
    with open(file, 'rb') as f:
        while chunk := f.read(65536):  # read in blocks to stay safe with large files
            sha256.update(chunk)
    return sha256.hexdigest()
