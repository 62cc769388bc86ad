from collections.abc import Sequence


class SpecMapError(Exception):
    """Base class for errors raised by specmap."""


class ParseError(SpecMapError):
    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        location = f" (line {line}, column {column})" if line is not None and column is not None else ""
        super().__init__(f"{message}{location}")


class InvalidPathError(SpecMapError):
    def __init__(self, message: str, path: Sequence[str] = ()) -> None:
        self.message = message
        self.path = tuple(path)
        super().__init__(message)


class SerializeError(SpecMapError):
    pass


class UnsupportedFormatError(SpecMapError, ValueError):
    pass
