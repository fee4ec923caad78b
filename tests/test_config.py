"""
Catalog Backend: Settings Tests
================================

What:  Validation and derived values of catalog.config.Settings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from catalog.config import Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.backend_port == 3000
        assert settings.resize_max_width == settings.resize_max_height == 3200
        assert settings.image_resizer == "pillow"
        assert settings.is_sqlite

    def test_resizer_name_normalised(self):
        assert Settings(image_resizer=" Pillow ").image_resizer == "pillow"

    def test_unknown_resizer_rejected(self):
        with pytest.raises(ValidationError, match="Unknown image_resizer"):
            Settings(image_resizer="graphicsmagick")

    def test_log_level_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_postgres_url_is_not_sqlite(self):
        assert not Settings(database_url="postgresql+asyncpg://u:p@db/catalog").is_sqlite

    def test_building_app_leaves_image_directory_alone(self):
        from catalog.main import app

        directory = Path(app.state.settings.image_directory)
        assert not directory.exists()
