"""Dataclass-based domain configuration pattern.

The task tracker defines its storage locations, upload limits and status
policy as a frozen dataclass. This gives you:
- Type safety (IDE autocompletion, mypy checking)
- Default values (sensible out-of-the-box)
- Immutability (frozen=True prevents accidental mutation)
- Easy overrides (from env vars or test fixtures)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from patterns.workflow_states import DEFAULT_STATUSES, StatusPolicyMode


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StorageConfig:
    """Where the task collection document lives."""

    db_file: Path = Path("db.json")


@dataclass(frozen=True)
class UploadConfig:
    """Attachment payload storage and limits."""

    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    public_prefix: str = "/uploads"
    chunk_size: int = 1024 * 1024


@dataclass(frozen=True)
class StatusConfig:
    """Status set and how strictly updates are checked."""

    statuses: tuple[str, ...] = DEFAULT_STATUSES
    policy: StatusPolicyMode = StatusPolicyMode.PERMISSIVE

    @property
    def initial(self) -> str:
        return self.statuses[0]


# ---------------------------------------------------------------------------
# Top-level domain config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskTrackerConfig:
    """Complete configuration for the task tracker.

    Usage::

        config = TaskTrackerConfig.from_env()
        store = TaskStore(JsonDocumentFile(config.storage.db_file), ...)
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    uploads: UploadConfig = field(default_factory=UploadConfig)
    status: StatusConfig = field(default_factory=StatusConfig)

    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @classmethod
    def default(cls) -> "TaskTrackerConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def for_directory(cls, base_dir: Path, **overrides) -> "TaskTrackerConfig":
        """Config with the document and uploads rooted under base_dir."""
        return cls(
            storage=StorageConfig(db_file=Path(base_dir) / "db.json"),
            uploads=UploadConfig(upload_dir=Path(base_dir) / "uploads"),
            **overrides,
        )

    @classmethod
    def from_env(cls, prefix: str = "TASKS_") -> "TaskTrackerConfig":
        """Create config from environment variables.

        Example: TASKS_STATUS_POLICY=strict TASKS_MAX_UPLOAD_BYTES=2097152
        """
        storage = StorageConfig(
            db_file=Path(os.getenv(f"{prefix}DB_FILE", "db.json")),
        )

        upload_overrides = {}
        upload_dir = os.getenv(f"{prefix}UPLOAD_DIR")
        if upload_dir:
            upload_overrides["upload_dir"] = Path(upload_dir)
        max_bytes = os.getenv(f"{prefix}MAX_UPLOAD_BYTES")
        if max_bytes:
            upload_overrides["max_upload_bytes"] = int(max_bytes)

        status_overrides = {}
        statuses = os.getenv(f"{prefix}STATUSES")
        if statuses:
            values = tuple(s.strip() for s in statuses.split(",") if s.strip())
            if values:
                status_overrides["statuses"] = values
        policy = os.getenv(f"{prefix}STATUS_POLICY")
        if policy:
            status_overrides["policy"] = StatusPolicyMode(policy.strip().lower())

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            storage=storage,
            uploads=UploadConfig(**upload_overrides),
            status=StatusConfig(**status_overrides),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
