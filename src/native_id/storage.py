"""Security native identifier storage backed by per-partition CSV files.

Each partition (usually one per external system) is persisted as
``<partition>.csv`` in the storage directory, one row per association::

    SecurityCode,BoardCode,TypeToken,ValueText

Memory is the source of truth while the process runs. ``try_add`` admits a
pair under the storage lock and appends its row after releasing the lock;
a failed append is logged and never rolled back, so a crash between the two
steps loses that row from disk.
"""

import csv
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from src.native_id.config import NativeIdStorageConfig
from src.native_id.errors import (
    NativeIdError,
    NativeIdLoadError,
    PartitionLoadError,
)
from src.native_id.index import BidirectionalIndex
from src.native_id.schemas import SecurityId
from src.native_id.types import TypeRegistry, default_registry
from src.observability.metrics import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)

_FILE_SUFFIX = ".csv"
_ROW_FIELDS = 4

# Native ids are keyed by (type, value) so 1, True, 1.0 and "1" stay distinct
_NativeKey = tuple[type, Any]


def _native_key(native_id: Any) -> _NativeKey:
    return (type(native_id), native_id)


def _validate_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ValueError("Storage name must be a non-empty string")
    if name in (".", "..") or any(c in name for c in ("/", "\\", "\x00")):
        raise ValueError(f"Invalid storage name: {name!r}")


class NativeIdStorage(ABC):
    """Security native identifier storage."""

    @abstractmethod
    def init(self) -> None:
        """Initialize the storage. Call once before use."""

    @abstractmethod
    def get(self, name: str) -> list[tuple[SecurityId, Any]]:
        """Snapshot of all (security id, native id) pairs of a partition."""

    @abstractmethod
    def try_add(self, name: str, security_id: SecurityId, native_id: Any) -> bool:
        """Associate ``security_id`` with ``native_id``.

        Returns False if either side is already bound in the partition.
        """

    @abstractmethod
    def try_get_by_native_id(self, name: str, native_id: Any) -> SecurityId | None:
        """Security id bound to ``native_id``, or None."""

    @abstractmethod
    def try_get_by_security_id(self, name: str, security_id: SecurityId) -> Any | None:
        """Native id bound to ``security_id``, or None."""


class CsvNativeIdStorage(NativeIdStorage):
    """CSV-backed native identifier storage.

    A single lock guards every partition index. Reads and the in-memory half
    of ``try_add`` hold it; file appends run after it is released, serialized
    per partition so rows never interleave.

    Args:
        path: Storage directory (default from config)
        config: Storage settings (default: NativeIdStorageConfig())
        registry: Type alias registry for native ids (default: shared registry)
        metrics: Metrics collector (default: global collector)
    """

    def __init__(
        self,
        path: str | Path | None = None,
        config: NativeIdStorageConfig | None = None,
        registry: TypeRegistry | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._config = config or NativeIdStorageConfig()
        raw_path = path if path is not None else self._config.path
        self._path = Path(raw_path).expanduser().resolve()
        self._registry = registry or default_registry
        self._metrics = metrics or get_metrics()

        self._lock = threading.Lock()
        self._partitions: dict[str, BidirectionalIndex[SecurityId, _NativeKey]] = {}
        self._file_locks: dict[str, threading.Lock] = {}

    @property
    def path(self) -> Path:
        """Absolute storage directory."""
        return self._path

    # ── Load ────────────────────────────────────────────────────

    def init(self) -> None:
        """Create the storage directory and load every partition file.

        Raises:
            NativeIdLoadError: One or more partition files failed to load.
                Raised after every file was attempted; the others stay loaded.
        """
        self._path.mkdir(parents=True, exist_ok=True)

        files = sorted(p for p in self._path.glob(f"*{_FILE_SUFFIX}") if p.is_file())
        errors: list[PartitionLoadError] = []

        for file_path in files:
            try:
                self._load_file(file_path)
            except PartitionLoadError as exc:
                errors.append(exc)
            except Exception as exc:
                error = PartitionLoadError(file_path.stem, file_path, str(exc))
                error.__cause__ = exc
                errors.append(error)

        for error in errors:
            logger.error("%s", error)
            self._metrics.record_load_error()

        logger.info(
            "Native id storage initialized from %s: %d file(s), %d failed",
            self._path, len(files), len(errors),
        )

        if errors:
            raise NativeIdLoadError(errors)

    def _load_file(self, file_path: Path) -> None:
        name = file_path.stem
        parsed: BidirectionalIndex[SecurityId, _NativeKey] = BidirectionalIndex()
        duplicates = 0

        with file_path.open("r", encoding=self._read_encoding(), newline="") as f:
            reader = csv.reader(f)
            for row in reader:
                if not row:
                    continue

                if len(row) != _ROW_FIELDS:
                    raise PartitionLoadError(
                        name, file_path,
                        f"expected {_ROW_FIELDS} fields, got {len(row)}",
                        line=reader.line_num,
                    )

                security_code, board_code, token, text = row
                try:
                    native_id = self._registry.from_text(token, text)
                except NativeIdError as exc:
                    raise PartitionLoadError(
                        name, file_path, str(exc), line=reader.line_num
                    ) from exc

                security_id = SecurityId(security_code, board_code)
                if parsed.try_add(security_id, _native_key(native_id)):
                    continue

                # First row wins; later rows reusing either side are dropped
                if self._config.strict_load:
                    raise PartitionLoadError(
                        name, file_path,
                        f"duplicate association {security_id} <-> {text!r}",
                        line=reader.line_num,
                    )
                duplicates += 1
                logger.warning(
                    "Dropping duplicate row %d in %s: %s <-> %r already bound",
                    reader.line_num, file_path, security_id, text,
                )

        # One critical section per file
        with self._lock:
            index = self._partitions.setdefault(name, BidirectionalIndex())
            for security_id, key in parsed.items():
                if not index.try_add(security_id, key):
                    duplicates += 1
            count = len(index)

        self._metrics.record_load_duplicates(name, duplicates)
        self._metrics.set_entries(name, count)
        logger.info("Loaded %d native id(s) for partition %r", count, name)

    def _read_encoding(self) -> str:
        # Tolerate a byte order mark left by spreadsheet editors
        if self._config.encoding.lower().replace("_", "-") in ("utf-8", "utf8"):
            return "utf-8-sig"
        return self._config.encoding

    # ── Queries ─────────────────────────────────────────────────

    def get(self, name: str) -> list[tuple[SecurityId, Any]]:
        """Snapshot of all pairs of a partition; empty if unknown."""
        _validate_name(name)

        with self._lock:
            index = self._partitions.get(name)
            if index is None:
                return []
            return [(security_id, key[1]) for security_id, key in index.items()]

    def try_get_by_native_id(self, name: str, native_id: Any) -> SecurityId | None:
        _validate_name(name)

        with self._lock:
            index = self._partitions.get(name)
            if index is None:
                return None
            return index.get_key(_native_key(native_id))

    def try_get_by_security_id(self, name: str, security_id: SecurityId) -> Any | None:
        _validate_name(name)

        with self._lock:
            index = self._partitions.get(name)
            if index is None:
                return None
            key = index.get_value(security_id)
        return key[1] if key is not None else None

    def partitions(self) -> list[str]:
        """Sorted names of all known partitions."""
        with self._lock:
            return sorted(self._partitions)

    def count(self, name: str) -> int:
        """Number of associations held for a partition."""
        _validate_name(name)

        with self._lock:
            index = self._partitions.get(name)
            return len(index) if index is not None else 0

    # ── Mutation ────────────────────────────────────────────────

    def try_add(self, name: str, security_id: SecurityId, native_id: Any) -> bool:
        """Associate ``security_id`` with ``native_id`` in a partition.

        The pair is visible to lookups as soon as this returns True. The row
        is appended to disk afterwards on a best-effort basis: an append
        failure is logged, not retried, and does not change the result.

        Raises:
            ValueError: Invalid partition name or missing native id.
            TypeError: ``security_id`` is not a SecurityId, or ``native_id``
                is unhashable or does not parse back from its persisted text.
        """
        _validate_name(name)
        if native_id is None or native_id == "":
            raise ValueError("Native id must not be None or empty")
        if not isinstance(security_id, SecurityId):
            raise TypeError(
                f"security_id must be a SecurityId, got {type(security_id).__name__}"
            )
        key = _native_key(native_id)
        hash(key)  # unhashable native ids fail here, before any state change
        try:
            token, text = self._registry.encode(native_id)
        except Exception as exc:
            raise TypeError(
                f"Native id of type {type(native_id).__name__} cannot be persisted: {exc}"
            ) from exc

        with self._lock:
            index = self._partitions.get(name)
            if index is None:
                index = self._partitions[name] = BidirectionalIndex()
            added = index.try_add(security_id, key)
            count = len(index)
            file_lock = self._file_locks.setdefault(name, threading.Lock())

        self._metrics.record_add(name, added)
        if not added:
            return False

        self._metrics.set_entries(name, count)
        row = [security_id.security_code, security_id.board_code, token, text]
        self._save(name, row, file_lock)
        return True

    def _save(self, name: str, row: list[str], file_lock: threading.Lock) -> None:
        file_path = self._path / f"{name}{_FILE_SUFFIX}"

        try:
            with file_lock:
                self._path.mkdir(parents=True, exist_ok=True)
                with file_path.open(
                    "a", encoding=self._config.encoding, newline=""
                ) as f:
                    csv.writer(f).writerow(row)
        except Exception:
            logger.exception("Save native id storage to %s failed", file_path)
            self._metrics.record_save_error(name)
