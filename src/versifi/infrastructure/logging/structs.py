"""
Logging configuration structs.

Loaded from the ``logging`` section of config.yaml or picked from the
environment presets when no section is given.
"""

from typing import Any, Dict, List, Optional

import msgspec
from msgspec import Struct, field

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENVIRONMENTS = ("dev", "test", "prod")


class BackendConfig(Struct, frozen=True):
    """Settings shared by every backend: on/off switch and level threshold."""
    enabled: bool = True
    min_level: str = "INFO"

    def validate(self) -> None:
        if self.min_level.upper() not in LEVEL_NAMES:
            raise ValueError(f"Invalid log level: {self.min_level}")


class ConsoleBackendConfig(BackendConfig):
    """
    Console output through the standard ``logging`` module.

    Attributes:
        color: ANSI colored level names
        include_context: Append ``key=value`` context after the message
        max_message_length: Longer messages (frame previews) are cut here
    """
    color: bool = True
    include_context: bool = True
    max_message_length: int = 1000


class FileBackendConfig(BackendConfig):
    """
    Buffered file output with size based rotation.

    Attributes:
        path: Log file path; parent directories are created
        format: "text" or "json" (one object per line)
        max_size_mb: Rotate once the file grows past this size
        backup_count: Rotated files kept as path.1 ... path.N
        flush_interval: Seconds a record may wait in the buffer
        include_audit: Also write order audit records
    """
    path: str = "logs/versifi.log"
    format: str = "text"
    max_size_mb: int = 100
    backup_count: int = 5
    flush_interval: float = 1.0
    include_audit: bool = True

    def validate(self) -> None:
        super().validate()
        if self.format not in ("text", "json"):
            raise ValueError(f"Invalid file format: {self.format}")
        if self.max_size_mb <= 0 or self.backup_count < 0:
            raise ValueError("max_size_mb must be positive and backup_count non-negative")


class RouterConfig(Struct, frozen=True):
    """Backends receiving TEXT records below WARNING."""
    default_backends: List[str] = field(default_factory=lambda: ["console"])


class LoggingConfig(Struct, frozen=True):
    """
    Complete logging configuration.

    Attributes:
        environment: dev, test or prod
        console: Console backend, disabled when None
        file: File backend, disabled when None
        router: Routing of low level text records
        default_context: Context attached to every record
    """
    environment: str = "dev"
    console: Optional[ConsoleBackendConfig] = None
    file: Optional[FileBackendConfig] = None
    router: Optional[RouterConfig] = None
    default_context: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        if self.environment not in ENVIRONMENTS:
            raise ValueError(f"Invalid environment: {self.environment}")
        for backend in (self.console, self.file):
            if backend is not None:
                backend.validate()

    def enabled_backends(self) -> List[str]:
        return [
            name for name, backend in (("console", self.console), ("file", self.file))
            if backend is not None and backend.enabled
        ]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Build from a plain mapping such as the parsed ``logging`` section."""
        config = msgspec.convert(data, cls, strict=False)
        config.validate()
        return config

    @classmethod
    def for_environment(cls, environment: str) -> "LoggingConfig":
        """
        Preset for an environment name.

        dev: colored DEBUG console. test: WARNING console only.
        prod: WARNING console plus a JSON file receiving INFO and metrics.
        Unknown names fall back to dev.
        """
        environment = environment.lower()
        if environment in ("prod", "production"):
            return cls(
                environment="prod",
                console=ConsoleBackendConfig(min_level="WARNING", color=False),
                file=FileBackendConfig(path="logs/versifi.log", format="json",
                                       max_size_mb=500, backup_count=10),
                router=RouterConfig(default_backends=["file"]),
            )
        if environment == "test":
            return cls(
                environment="test",
                console=ConsoleBackendConfig(min_level="WARNING", color=False),
            )
        return cls(
            environment="dev",
            console=ConsoleBackendConfig(min_level="DEBUG"),
        )
