import enum


class ErrorKind(enum.Enum):
    FORMAT = "format"
    CONFIG = "config"
    IO = "io"


class CodecError(Exception):
    kind: ErrorKind | None = None

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


# malformed or unsupported binary input
class FormatError(CodecError, ValueError):
    kind = ErrorKind.FORMAT


# invalid caller-supplied arguments, raised before any output is produced
class ConfigError(CodecError, ValueError):
    kind = ErrorKind.CONFIG


class CodecIOError(CodecError, OSError):
    kind = ErrorKind.IO
