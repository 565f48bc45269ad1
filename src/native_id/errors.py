"""Exceptions raised by the native identifier storage."""

from pathlib import Path


class NativeIdError(Exception):
    """Base class for native identifier storage errors."""


class UnknownNativeIdTypeError(NativeIdError, LookupError):
    """Raised when a persisted type token cannot be resolved to a type."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown native id type: {token!r}")
        self.token = token


class NativeIdFormatError(NativeIdError, ValueError):
    """Raised when a native id cannot be converted to or from text."""

    def __init__(self, token: str, text: str, reason: str) -> None:
        super().__init__(f"Cannot convert {text!r} as {token}: {reason}")
        self.token = token
        self.text = text


class PartitionLoadError(NativeIdError):
    """A single partition file could not be loaded."""

    def __init__(
        self,
        partition: str,
        path: Path,
        reason: str,
        line: int | None = None,
    ) -> None:
        location = f"{path} line {line}" if line is not None else str(path)
        super().__init__(
            f"Failed to load partition {partition!r} from {location}: {reason}"
        )
        self.partition = partition
        self.path = path
        self.line = line


class NativeIdLoadError(NativeIdError):
    """Aggregate of every partition that failed during ``init()``.

    Raised once, after all partition files were attempted. Partitions that
    loaded successfully remain available in the storage.
    """

    def __init__(self, errors: list[PartitionLoadError]) -> None:
        self.errors = list(errors)
        names = ", ".join(repr(e.partition) for e in self.errors)
        super().__init__(
            f"{len(self.errors)} partition(s) failed to load: {names}"
        )

    @property
    def partitions(self) -> list[str]:
        """Names of the partitions that failed to load."""
        return [e.partition for e in self.errors]
