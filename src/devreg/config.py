"""Runtime configuration for the registry service.

Settings are read from the process environment, after loading a `.env`
file from the working directory if one exists.

Environment Variables:
    - REGISTRY_DATA_FILE: Path of the JSON registry document (default: photos.json)
    - REGISTRY_UPLOAD_DIR: Directory photos are written to (default: uploads)
    - REGISTRY_STATIC_DIR: Optional static front end served at /static (default: static)
    - CORS_ORIGINS: Comma-separated allowed origins (default: *)
    - MAX_UPLOAD_SIZE_MB: Photo size limit in megabytes (default: 10)
    - LOG_LEVEL: Root log level (default: INFO)
    - HOST / PORT: Bind address for the uvicorn entry point (default: 0.0.0.0:3000)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", setting=name, cause=e
        ) from e


@dataclass(frozen=True)
class Settings:
    """Configuration for the registry service.

    Attributes:
        data_file: JSON document holding devices and users
        upload_dir: Directory of the photo content store
        static_dir: Static front end directory, mounted only if it exists
        cors_origins: Origins allowed by the CORS middleware
        max_upload_size_mb: Largest accepted photo upload
        log_level: Root logger level name
        host: Bind host used by main()
        port: Bind port used by main()
    """

    data_file: Path = Path("photos.json")
    upload_dir: Path = Path("uploads")
    static_dir: Optional[Path] = Path("static")
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    max_upload_size_mb: int = 10
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigurationError: If a numeric setting is malformed
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        static_dir = os.getenv("REGISTRY_STATIC_DIR", "static")
        origins = [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", "*").split(",")
            if o.strip()
        ]

        max_upload = _int_env("MAX_UPLOAD_SIZE_MB", 10)
        if max_upload <= 0:
            raise ConfigurationError(
                "MAX_UPLOAD_SIZE_MB must be positive", setting="MAX_UPLOAD_SIZE_MB"
            )

        return cls(
            data_file=Path(os.getenv("REGISTRY_DATA_FILE", "photos.json")),
            upload_dir=Path(os.getenv("REGISTRY_UPLOAD_DIR", "uploads")),
            static_dir=Path(static_dir) if static_dir else None,
            cors_origins=origins or ["*"],
            max_upload_size_mb=max_upload,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_int_env("PORT", 3000),
        )
