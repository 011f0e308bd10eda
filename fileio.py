import logging
import os

from errors import CodecIOError

logger = logging.getLogger(__name__)


def read_binary_file(path: str | os.PathLike) -> bytes:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise CodecIOError(f"failed to read {os.fspath(path)}: {e.strerror or e}") from e
    logger.debug(f"read {len(data)} bytes from {os.fspath(path)}")
    return data


def write_binary_file(path: str | os.PathLike, data: bytes) -> None:
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise CodecIOError(f"failed to write {os.fspath(path)}: {e.strerror or e}") from e
    logger.debug(f"wrote {len(data)} bytes to {os.fspath(path)}")
