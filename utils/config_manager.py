"""
Unified configuration management.
Loads the JSON configuration directory and offers type-safe accessors.
"""

import json
import logging
from typing import Any, Optional, Dict, List, TypeVar
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ConfigurationError, ErrorCodes
from .path_utils import CONFIG_DIR, BASE_DIR

config_logger = logging.getLogger("Config")

T = TypeVar('T')

# ============================================================================
# Configuration dataclasses
# ============================================================================

@dataclass
class LoggingModuleConfig:
    """Per-module logging configuration"""
    level: str = "INFO"
    enabled: bool = True

@dataclass
class FileLoggingConfig:
    """File logging configuration"""
    enabled: bool = True
    directory: str = "log"
    filename: str = "sys.log"
    rotation: Optional[Dict[str, Any]] = None

@dataclass
class ConsoleLoggingConfig:
    """Console logging configuration"""
    enabled: bool = True

@dataclass
class PerformanceConfig:
    """Slow operation monitoring"""
    enabled: bool = True
    slow_operation_threshold: float = 1.0

@dataclass
class LoggingConfig:
    """Complete logging configuration"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_config: FileLoggingConfig = field(default_factory=FileLoggingConfig)
    console_config: ConsoleLoggingConfig = field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, LoggingModuleConfig] = field(default_factory=dict)
    performance_monitoring: PerformanceConfig = field(default_factory=PerformanceConfig)

@dataclass
class StorageConfig:
    """Persistence backend configuration"""
    backend: str = "sqlite"  # sqlite | json
    db_path: str = "data/prices.db"
    json_path: str = "data/prices.json"

@dataclass
class ApiConfig:
    """API server configuration"""
    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 1
    reload: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

@dataclass
class PricingConfig:
    """Statistics, expiry and alert thresholds"""
    private_expiry_days: int = 180
    public_expiry_days: int = 360
    warning_days: int = 15
    attention_days: int = 30
    min_valid_quotes: int = 3
    max_cv: float = 25.0
    timezone: str = "America/Sao_Paulo"

@dataclass
class ReportConfig:
    """Report configuration"""
    templates: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    formats: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    field_labels: Dict[str, str] = field(default_factory=dict)


# ============================================================================
# Unified configuration manager
# ============================================================================

class UnifiedConfigManager:
    """Loads every *.json file in the config directory and merges them"""

    def __init__(self, config_dir: str = str(CONFIG_DIR)):
        self._config_dir = Path(config_dir)
        self._config_data: Dict[str, Any] = {}
        self._typed_cache: Dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """Load and merge configuration files"""
        merged_config = {}
        try:
            config_logger.info(f"Loading configuration from directory: {self._config_dir}")

            if not self._config_dir.is_dir():
                raise ConfigurationError(
                    f"Configuration path is not a directory: {self._config_dir}",
                    ErrorCodes.CONFIG_NOT_FOUND
                )

            # Sorted so that later files override earlier ones deterministically
            config_files = sorted(self._config_dir.glob('*.json'))
            if not config_files:
                raise ConfigurationError(
                    f"No configuration files (.json) found in: {self._config_dir}",
                    ErrorCodes.CONFIG_NOT_FOUND
                )

            for config_file in config_files:
                if config_file.name == "config.merged.json":
                    continue
                try:
                    with open(config_file, 'r', encoding='utf-8') as f:
                        merged_config.update(json.load(f))
                    config_logger.debug(f"Loaded and merged: {config_file.name}")
                except json.JSONDecodeError as e:
                    raise ConfigurationError(
                        f"Invalid JSON in configuration file {config_file.name}: {e}",
                        ErrorCodes.CONFIG_INVALID_FORMAT
                    ) from e

            self._config_data = merged_config
            config_logger.info(f"Configuration loaded and merged from {len(config_files)} files.")
            self._typed_cache.clear()

        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Failed to load configuration: {e}",
                ErrorCodes.CONFIG_INVALID_FORMAT
            ) from e

    def reload_config(self) -> None:
        """Reload configuration from disk"""
        config_logger.info("Reloading configuration...")
        self._load_config()

    # ========================================================================
    # Raw access
    # ========================================================================

    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        return self._config_data.get(key, default)

    def get_nested(self, path: str, default: Optional[T] = None) -> Optional[T]:
        """Get a nested value using a dot separated path"""
        keys = path.split('.')
        current = self._config_data

        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def set(self, key: str, value: Any) -> None:
        self._config_data[key] = value
        self._typed_cache.pop(key, None)

    def set_nested(self, path: str, value: Any) -> None:
        keys = path.split('.')
        current = self._config_data

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value
        self._typed_cache.pop(keys[0], None)

    def __contains__(self, key: str) -> bool:
        return key in self._config_data

    def __getitem__(self, key: str) -> Any:
        return self._config_data[key]

    # ========================================================================
    # Typed access
    # ========================================================================

    def get_logging_config(self) -> LoggingConfig:
        """Typed logging configuration"""
        if 'logging_config' not in self._typed_cache:
            try:
                logging_data = self.get_nested('logging_config', {})

                file_data = logging_data.get('file_config', {})
                file_config = FileLoggingConfig(
                    enabled=file_data.get('enabled', True),
                    directory=file_data.get('directory', 'log'),
                    filename=file_data.get('filename', 'sys.log'),
                    rotation=file_data.get('rotation')
                )

                console_data = logging_data.get('console_config', {})
                console_config = ConsoleLoggingConfig(
                    enabled=console_data.get('enabled', True)
                )

                perf_data = logging_data.get('performance_monitoring', {})
                perf_config = PerformanceConfig(
                    enabled=perf_data.get('enabled', True),
                    slow_operation_threshold=perf_data.get('slow_operation_threshold', 1.0)
                )

                modules = {}
                for module_name, module_data in logging_data.get('modules', {}).items():
                    modules[module_name] = LoggingModuleConfig(
                        level=module_data.get('level', 'INFO'),
                        enabled=module_data.get('enabled', True)
                    )

                self._typed_cache['logging_config'] = LoggingConfig(
                    level=logging_data.get('level', 'INFO'),
                    file_config=file_config,
                    console_config=console_config,
                    modules=modules,
                    performance_monitoring=perf_config
                )
            except Exception as e:
                config_logger.error(f"Failed to parse logging config: {e}")
                self._typed_cache['logging_config'] = LoggingConfig()

        return self._typed_cache['logging_config']

    def get_storage_config(self) -> StorageConfig:
        """Typed storage configuration, paths resolved against the project root"""
        if 'storage_config' not in self._typed_cache:
            try:
                storage_data = self.get_nested('storage_config', {})
                self._typed_cache['storage_config'] = StorageConfig(
                    backend=storage_data.get('backend', 'sqlite'),
                    db_path=self._resolve_path(storage_data.get('db_path', 'data/prices.db')),
                    json_path=self._resolve_path(storage_data.get('json_path', 'data/prices.json'))
                )
            except Exception as e:
                config_logger.error(f"Failed to parse storage config: {e}")
                self._typed_cache['storage_config'] = StorageConfig()

        return self._typed_cache['storage_config']

    def get_api_config(self) -> ApiConfig:
        """Typed API configuration"""
        if 'api_config' not in self._typed_cache:
            try:
                api_data = self.get_nested('api_config', {})
                self._typed_cache['api_config'] = ApiConfig(
                    host=api_data.get('host', '0.0.0.0'),
                    port=api_data.get('port', 3000),
                    workers=api_data.get('workers', 1),
                    reload=api_data.get('reload', False),
                    cors_origins=api_data.get('cors_origins', ['*'])
                )
            except Exception as e:
                config_logger.error(f"Failed to parse api config: {e}")
                self._typed_cache['api_config'] = ApiConfig()

        return self._typed_cache['api_config']

    def get_pricing_config(self) -> PricingConfig:
        """Typed pricing configuration"""
        if 'pricing_config' not in self._typed_cache:
            try:
                pricing_data = self.get_nested('pricing_config', {})
                self._typed_cache['pricing_config'] = PricingConfig(
                    private_expiry_days=pricing_data.get('private_expiry_days', 180),
                    public_expiry_days=pricing_data.get('public_expiry_days', 360),
                    warning_days=pricing_data.get('warning_days', 15),
                    attention_days=pricing_data.get('attention_days', 30),
                    min_valid_quotes=pricing_data.get('min_valid_quotes', 3),
                    max_cv=pricing_data.get('max_cv', 25.0),
                    timezone=pricing_data.get('timezone', 'America/Sao_Paulo')
                )
            except Exception as e:
                config_logger.error(f"Failed to parse pricing config: {e}")
                self._typed_cache['pricing_config'] = PricingConfig()

        return self._typed_cache['pricing_config']

    def get_report_config(self) -> ReportConfig:
        """Typed report configuration"""
        if 'report_config' not in self._typed_cache:
            try:
                report_data = self.get_nested('report_config', {})
                self._typed_cache['report_config'] = ReportConfig(
                    templates=report_data.get('templates', {}),
                    formats=report_data.get('formats', {}),
                    field_labels=report_data.get('field_labels', {})
                )
            except Exception as e:
                config_logger.error(f"Failed to parse report config: {e}")
                self._typed_cache['report_config'] = ReportConfig()

        return self._typed_cache['report_config']

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _resolve_path(path: str) -> str:
        if path == ':memory:' or Path(path).is_absolute():
            return path
        return str(BASE_DIR / path)

    def to_dict(self) -> Dict[str, Any]:
        """Copy of the merged configuration"""
        return self._config_data.copy()

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        self._config_data.update(config_dict)
        self._typed_cache.clear()
        config_logger.info("Configuration updated from dict")

    def save_config(self, file_path: Optional[str] = None) -> None:
        """Write the merged configuration to a single file"""
        save_path = Path(file_path) if file_path else self._config_dir / "config.merged.json"

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            config_logger.info(f"Current merged configuration saved to: {save_path}")
        except OSError as e:
            raise ConfigurationError(
                f"Failed to save configuration: {e}",
                ErrorCodes.CONFIG_INVALID_FORMAT
            ) from e

    def clear_cache(self) -> None:
        self._typed_cache.clear()
        config_logger.debug("Configuration cache cleared")


# ============================================================================
# Global instance
# ============================================================================

config_manager = UnifiedConfigManager()
