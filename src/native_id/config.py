"""Configuration for the native identifier storage."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NativeIdStorageConfig(BaseSettings):
    """Settings for the CSV-backed native identifier storage."""

    model_config = SettingsConfigDict(
        env_prefix="NATIVE_ID_",
        case_sensitive=False,
        extra="ignore",
    )

    path: str = Field(
        default="native_ids",
        min_length=1,
        description="Directory holding one <partition>.csv file per partition",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of partition files",
    )
    strict_load: bool = Field(
        default=False,
        description="Fail a partition on duplicate rows instead of keeping the first",
    )
