"""
Unit tests for configuration manager
"""

import pytest
import json

from utils.config_manager import UnifiedConfigManager, PricingConfig
from utils.exceptions import ConfigurationError, ErrorCodes
from utils.path_utils import BASE_DIR


@pytest.mark.unit
class TestConfigManager:
    """Test cases for UnifiedConfigManager"""

    @pytest.fixture
    def sample_config(self):
        return {
            "storage_config": {
                "backend": "json",
                "db_path": "data/test.db",
                "json_path": "/tmp/prices.json"
            },
            "api_config": {
                "host": "127.0.0.1",
                "port": 8001
            },
            "pricing_config": {
                "private_expiry_days": 90,
                "max_cv": 30.0
            }
        }

    @pytest.fixture
    def config_dir(self, sample_config, temp_dir):
        with open(temp_dir / "config.json", 'w', encoding='utf-8') as f:
            json.dump(sample_config, f)
        return temp_dir

    @pytest.fixture
    def config_manager(self, config_dir):
        return UnifiedConfigManager(str(config_dir))

    def test_typed_sections(self, config_manager):
        pricing = config_manager.get_pricing_config()
        assert pricing.private_expiry_days == 90
        assert pricing.public_expiry_days == 360
        assert pricing.max_cv == 30.0
        assert pricing.min_valid_quotes == 3

        api = config_manager.get_api_config()
        assert api.host == "127.0.0.1"
        assert api.port == 8001
        assert api.workers == 1

    def test_storage_paths_resolved_against_project_root(self, config_manager):
        storage = config_manager.get_storage_config()
        assert storage.backend == "json"
        assert storage.db_path == str(BASE_DIR / "data/test.db")
        assert storage.json_path == "/tmp/prices.json"

    def test_memory_database_path_kept(self, temp_dir):
        with open(temp_dir / "config.json", 'w', encoding='utf-8') as f:
            json.dump({"storage_config": {"db_path": ":memory:"}}, f)

        manager = UnifiedConfigManager(str(temp_dir))
        assert manager.get_storage_config().db_path == ":memory:"

    def test_missing_section_uses_defaults(self, temp_dir):
        with open(temp_dir / "config.json", 'w', encoding='utf-8') as f:
            json.dump({"other": 1}, f)

        manager = UnifiedConfigManager(str(temp_dir))
        assert manager.get_pricing_config() == PricingConfig()
        assert manager.get_storage_config().backend == "sqlite"

    def test_later_files_override_earlier(self, config_dir):
        with open(config_dir / "z_local.json", 'w', encoding='utf-8') as f:
            json.dump({"api_config": {"port": 9000}}, f)

        manager = UnifiedConfigManager(str(config_dir))
        assert manager.get_api_config().port == 9000

    def test_nested_access(self, config_manager):
        assert config_manager.get_nested("pricing_config.max_cv") == 30.0
        assert config_manager.get_nested("pricing_config.unknown", "x") == "x"
        assert "api_config" in config_manager
        assert config_manager["api_config"]["port"] == 8001

    def test_set_nested_invalidates_typed_cache(self, config_manager):
        assert config_manager.get_pricing_config().max_cv == 30.0

        config_manager.set_nested("pricing_config.max_cv", 40.0)

        assert config_manager.get_pricing_config().max_cv == 40.0

    def test_save_config_is_not_reloaded_as_source(self, config_manager, config_dir):
        config_manager.set("extra", {"value": 1})
        config_manager.save_config()

        assert (config_dir / "config.merged.json").exists()

        reloaded = UnifiedConfigManager(str(config_dir))
        assert reloaded.get("extra") is None

    def test_missing_directory_raises(self, temp_dir):
        with pytest.raises(ConfigurationError) as exc_info:
            UnifiedConfigManager(str(temp_dir / "missing"))
        assert exc_info.value.error_code == ErrorCodes.CONFIG_NOT_FOUND

    def test_empty_directory_raises(self, temp_dir):
        with pytest.raises(ConfigurationError):
            UnifiedConfigManager(str(temp_dir))

    def test_invalid_json_raises(self, temp_dir):
        (temp_dir / "config.json").write_text("{not json", encoding='utf-8')

        with pytest.raises(ConfigurationError) as exc_info:
            UnifiedConfigManager(str(temp_dir))
        assert exc_info.value.error_code == ErrorCodes.CONFIG_INVALID_FORMAT
