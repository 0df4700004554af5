"""Application configuration defaults."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

LOGGER = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({".txt", ".md", ".markdown"})
DOCUMENT_EXTENSIONS = TEXT_EXTENSIONS | {".pdf"}
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff", ".tif", ".webp"})


def _get_default_db_path() -> Path:
    """Get the default database path based on platform and execution context."""
    user_db = Path.home() / "Documents" / "HomeIndex" / "homeindex.db"

    if getattr(sys, "frozen", False):
        return user_db

    # When running from source, prefer local data/ if it exists
    local_db = Path("data/homeindex.db")
    if local_db.exists():
        return local_db

    return user_db


def _split_paths(value: str) -> list[Path]:
    return [Path(part).expanduser() for part in value.split(os.pathsep) if part.strip()]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    document_dirs: list[Path] = field(default_factory=lambda: [Path("documents")])
    image_dirs: list[Path] = field(default_factory=lambda: [Path("images")])
    pictures_dir: Path = field(default_factory=lambda: Path.home() / "Pictures")
    scan_photo_library: bool = True
    ocr_endpoint: str | None = None
    ocr_key: str | None = None
    ocr_poll_interval: float = 1.0
    ocr_max_polls: int = 120
    scan_interval_hours: float = 6.0
    seed_page_size: int = 100
    enable_scheduler: bool = True

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a configuration from environment variables.

        Unset variables keep their defaults. ``.env`` loading is left to the
        entry points.
        """
        env = os.environ if environ is None else environ
        config = cls()
        if env.get("HOMEINDEX_DB"):
            config.db_path = Path(env["HOMEINDEX_DB"]).expanduser()
        if env.get("HOMEINDEX_DOCUMENT_DIRS"):
            config.document_dirs = _split_paths(env["HOMEINDEX_DOCUMENT_DIRS"])
        if env.get("HOMEINDEX_IMAGE_DIRS"):
            config.image_dirs = _split_paths(env["HOMEINDEX_IMAGE_DIRS"])
        if env.get("HOMEINDEX_PICTURES_DIR"):
            config.pictures_dir = Path(env["HOMEINDEX_PICTURES_DIR"]).expanduser()
        if env.get("HOMEINDEX_SCAN_PHOTO_LIBRARY"):
            config.scan_photo_library = _parse_bool(env["HOMEINDEX_SCAN_PHOTO_LIBRARY"])
        config.ocr_endpoint = env.get("AZURE_COMPUTER_VISION_ENDPOINT") or None
        config.ocr_key = env.get("AZURE_COMPUTER_VISION_KEY") or None
        if env.get("HOMEINDEX_OCR_POLL_INTERVAL"):
            config.ocr_poll_interval = float(env["HOMEINDEX_OCR_POLL_INTERVAL"])
        if env.get("HOMEINDEX_OCR_MAX_POLLS"):
            config.ocr_max_polls = int(env["HOMEINDEX_OCR_MAX_POLLS"])
        if env.get("HOMEINDEX_SCAN_INTERVAL_HOURS"):
            config.scan_interval_hours = float(env["HOMEINDEX_SCAN_INTERVAL_HOURS"])
        if env.get("HOMEINDEX_SEED_PAGE_SIZE"):
            config.seed_page_size = int(env["HOMEINDEX_SEED_PAGE_SIZE"])
            if config.seed_page_size <= 0:
                raise ValueError("HOMEINDEX_SEED_PAGE_SIZE must be positive")
        if env.get("HOMEINDEX_SCHEDULER"):
            config.enable_scheduler = _parse_bool(env["HOMEINDEX_SCHEDULER"])
        return config

    @property
    def ocr_configured(self) -> bool:
        return bool(self.ocr_endpoint and self.ocr_key)

    @property
    def scan_interval_seconds(self) -> float:
        return self.scan_interval_hours * 3600

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path

    def ensure_directories(self) -> None:
        """Create the watched document and image directories."""
        for directory in [*self.document_dirs, *self.image_dirs]:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                LOGGER.warning("Could not create directory %s: %s", directory, exc)
            else:
                LOGGER.debug("Ensured directory exists: %s", directory)
