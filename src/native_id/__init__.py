"""Native id storage: persistent security id <-> native id mapping per partition."""

from src.native_id.config import NativeIdStorageConfig
from src.native_id.errors import (
    NativeIdError,
    NativeIdFormatError,
    NativeIdLoadError,
    PartitionLoadError,
    UnknownNativeIdTypeError,
)
from src.native_id.index import BidirectionalIndex
from src.native_id.schemas import SecurityId
from src.native_id.storage import CsvNativeIdStorage, NativeIdStorage
from src.native_id.types import TypeRegistry, default_registry

__all__ = [
    "BidirectionalIndex",
    "CsvNativeIdStorage",
    "NativeIdError",
    "NativeIdFormatError",
    "NativeIdLoadError",
    "NativeIdStorage",
    "NativeIdStorageConfig",
    "PartitionLoadError",
    "SecurityId",
    "TypeRegistry",
    "UnknownNativeIdTypeError",
    "default_registry",
]
