"""Configuration management for NEARLINK using Pydantic Settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KeyStoreBackend(str, Enum):
    """Key store storage media."""

    FILE = "file"
    LOCAL_STORAGE = "local_storage"


class NearlinkConfig(BaseSettings):
    """NEARLINK configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Node
    node_url: str = Field(default="http://localhost:3030", alias="NEARLINK_NODE_URL")
    network_id: str = Field(default="default", alias="NEARLINK_NETWORK_ID", min_length=1)
    request_timeout: float = Field(default=30.0, alias="NEARLINK_REQUEST_TIMEOUT", gt=0)

    # Keys
    key_store: KeyStoreBackend = Field(default=KeyStoreBackend.FILE, alias="NEARLINK_KEY_STORE")
    key_dir: str = Field(default="./neardev", alias="NEARLINK_KEY_DIR")

    # Observability
    log_level: str = Field(default="INFO", alias="NEARLINK_LOG_LEVEL")
    log_format: str = Field(default="json", alias="NEARLINK_LOG_FORMAT")
