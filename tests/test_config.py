"""Tests for application configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from homeindex.config import DOCUMENT_EXTENSIONS, IMAGE_EXTENSIONS, AppConfig


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self) -> None:
        """Should create config with default values."""
        config = AppConfig(db_path=Path("x.db"))

        assert config.document_dirs == [Path("documents")]
        assert config.image_dirs == [Path("images")]
        assert config.scan_interval_hours == 6.0
        assert config.ocr_max_polls == 120
        assert config.seed_page_size == 100
        assert not config.ocr_configured

    def test_default_db_path_is_filled(self) -> None:
        """Should pick a default database path when none is given."""
        assert AppConfig().db_path is not None

    def test_resolve_db_path_absolute(self) -> None:
        """Should return absolute path as-is."""
        config = AppConfig(db_path=Path("/absolute/path/db.db"))

        assert config.resolve_db_path(Path("/base")) == Path("/absolute/path/db.db")

    def test_resolve_db_path_relative_with_base(self) -> None:
        """Should resolve relative path against base_dir."""
        config = AppConfig(db_path=Path("relative/db.db"))

        assert config.resolve_db_path(Path("/base")) == Path("/base/relative/db.db")

    def test_scan_interval_seconds(self) -> None:
        assert AppConfig(scan_interval_hours=0.5).scan_interval_seconds == 1800

    def test_ensure_directories(self, tmp_path: Path) -> None:
        """Should create the watched directories."""
        config = AppConfig(document_dirs=[tmp_path / "d" / "e"], image_dirs=[tmp_path / "i"])

        config.ensure_directories()

        assert (tmp_path / "d" / "e").is_dir()
        assert (tmp_path / "i").is_dir()


class TestFromEnv:
    """Test AppConfig.from_env."""

    def test_empty_environment_keeps_defaults(self) -> None:
        config = AppConfig.from_env({})

        assert config.document_dirs == [Path("documents")]
        assert config.enable_scheduler
        assert config.ocr_endpoint is None

    def test_reads_all_variables(self, tmp_path: Path) -> None:
        env = {
            "HOMEINDEX_DB": str(tmp_path / "env.db"),
            "HOMEINDEX_DOCUMENT_DIRS": f"{tmp_path / 'a'}:{tmp_path / 'b'}",
            "HOMEINDEX_IMAGE_DIRS": str(tmp_path / "img"),
            "HOMEINDEX_PICTURES_DIR": str(tmp_path / "pics"),
            "HOMEINDEX_SCAN_PHOTO_LIBRARY": "no",
            "AZURE_COMPUTER_VISION_ENDPOINT": "https://vision.example.com/",
            "AZURE_COMPUTER_VISION_KEY": "secret",
            "HOMEINDEX_OCR_POLL_INTERVAL": "0.25",
            "HOMEINDEX_OCR_MAX_POLLS": "10",
            "HOMEINDEX_SCAN_INTERVAL_HOURS": "2",
            "HOMEINDEX_SEED_PAGE_SIZE": "50",
            "HOMEINDEX_SCHEDULER": "false",
        }

        config = AppConfig.from_env(env)

        assert config.db_path == tmp_path / "env.db"
        assert config.document_dirs == [tmp_path / "a", tmp_path / "b"]
        assert config.image_dirs == [tmp_path / "img"]
        assert config.pictures_dir == tmp_path / "pics"
        assert not config.scan_photo_library
        assert config.ocr_configured
        assert config.ocr_poll_interval == 0.25
        assert config.ocr_max_polls == 10
        assert config.scan_interval_seconds == 7200
        assert config.seed_page_size == 50
        assert not config.enable_scheduler

    def test_key_without_endpoint_is_not_configured(self) -> None:
        config = AppConfig.from_env({"AZURE_COMPUTER_VISION_KEY": "secret"})

        assert not config.ocr_configured

    @pytest.mark.parametrize("value", ["0", "-5"])
    def test_non_positive_seed_page_size(self, value: str) -> None:
        """Should reject page sizes that would never advance the seeding loop."""
        with pytest.raises(ValueError):
            AppConfig.from_env({"HOMEINDEX_SEED_PAGE_SIZE": value})

    def test_invalid_number(self) -> None:
        with pytest.raises(ValueError):
            AppConfig.from_env({"HOMEINDEX_OCR_MAX_POLLS": "many"})


class TestExtensions:
    def test_document_types(self) -> None:
        assert {".txt", ".md", ".pdf"} <= DOCUMENT_EXTENSIONS
        assert ".docx" not in DOCUMENT_EXTENSIONS

    def test_image_types_are_disjoint(self) -> None:
        assert not (DOCUMENT_EXTENSIONS & IMAGE_EXTENSIONS)
