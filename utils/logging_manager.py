"""
Unified logging management.
Configures console/file handlers from the config file and provides module
loggers plus an operation-timing context manager.
"""

import logging
import sys
import time
import functools
import asyncio
import traceback
import threading
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional, Dict, Any, Callable
from dataclasses import dataclass

from .exceptions import PriceResearchError, ErrorCodes
from .config_manager import config_manager
from .path_utils import BASE_DIR, LOG_DIR

logger = logging.getLogger("LoggingManager")


@dataclass
class LogConfig:
    """Effective logging settings"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_max_bytes: int = 10 * 1024 * 1024
    file_backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = True
    log_directory: Optional[str] = None
    log_filename: str = "sys.log"
    rotation_type: str = "size"  # "size" or "time"


class LoggingManager:
    """Process-wide logging manager"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, '_initialized'):
            return

        self._initialized = True
        self._loggers: Dict[str, logging.Logger] = {}
        self._config = LogConfig()
        self._slow_operation_threshold = 1.0

    def configure(self, config: LogConfig = None):
        """Apply a logging configuration to the root logger"""
        if config:
            self._config = config

        if self._config.log_directory is None:
            self._config.log_directory = str(LOG_DIR)

        Path(self._config.log_directory).mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self._config.level.upper()))

        self._clear_handlers(root_logger)

        if self._config.enable_console:
            self._add_console_handler(root_logger)

        if self._config.enable_file:
            self._add_file_handler(root_logger)

    def configure_from_config_file(self):
        """Load logging settings from config_manager"""
        try:
            logging_config = config_manager.get_logging_config()

            log_directory = Path(logging_config.file_config.directory)
            if not log_directory.is_absolute():
                log_directory = BASE_DIR / log_directory

            rotation = logging_config.file_config.rotation or {}

            config = LogConfig(
                level=logging_config.level,
                format=logging_config.format,
                date_format=logging_config.date_format,
                file_max_bytes=rotation.get('max_bytes_mb', 10) * 1024 * 1024,
                file_backup_count=rotation.get('backup_count', 5),
                enable_console=logging_config.console_config.enabled,
                enable_file=logging_config.file_config.enabled,
                log_directory=str(log_directory),
                log_filename=logging_config.file_config.filename,
                rotation_type=rotation.get('type', 'size')
            )

            self.configure(config)

            for module_name, module_config in logging_config.modules.items():
                module_logger = self.get_logger(module_name)
                if module_config.enabled:
                    module_logger.setLevel(getattr(logging, module_config.level.upper()))
                else:
                    module_logger.setLevel(logging.CRITICAL)

            self._slow_operation_threshold = logging_config.performance_monitoring.slow_operation_threshold

            return logging_config

        except Exception as e:
            raise PriceResearchError(
                f"Failed to configure logging from config file: {str(e)}",
                ErrorCodes.CONFIG_INVALID_FORMAT
            ) from e

    def _clear_handlers(self, target: logging.Logger):
        for handler in target.handlers[:]:
            handler.close()
            target.removeHandler(handler)

    def _add_console_handler(self, target: logging.Logger):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(
            self._config.format,
            datefmt=self._config.date_format
        ))
        target.addHandler(console_handler)

    def _add_file_handler(self, target: logging.Logger):
        log_file_path = Path(self._config.log_directory) / self._config.log_filename

        if self._config.rotation_type == "size":
            file_handler = RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self._config.file_max_bytes,
                backupCount=self._config.file_backup_count,
                encoding="utf-8"
            )
        else:
            file_handler = TimedRotatingFileHandler(
                filename=log_file_path,
                when="midnight",
                interval=1,
                backupCount=self._config.file_backup_count,
                encoding="utf-8"
            )

        file_handler.setFormatter(logging.Formatter(
            self._config.format,
            datefmt=self._config.date_format
        ))
        target.addHandler(file_handler)

    def get_logger(self, name: str = None) -> logging.Logger:
        if name is None:
            name = "priceresearch"

        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)

        return self._loggers[name]


class LogContext:
    """Logs start, completion time and failure of an operation"""

    def __init__(self, module: str, operation: str = None,
                 process_id: Any = None, item_id: Any = None,
                 extra_context: Dict[str, Any] = None):
        self.module = module
        self.operation = operation
        self.process_id = process_id
        self.item_id = item_id
        self.extra_context = {k: v for k, v in (extra_context or {}).items()
                              if not k.startswith('_')}
        self.start_time = None
        self.logger = logging_manager.get_logger(module)

    def __enter__(self):
        self.start_time = time.time()
        self._log_start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type is not None:
            self._log_error(exc_val, duration, exc_tb)
        else:
            self._log_success(duration)

    def _get_context_str(self) -> str:
        parts = [self.module]

        if self.operation:
            parts.append(self.operation)

        if self.process_id is not None:
            parts.append(f"Process:{self.process_id}")

        if self.item_id is not None:
            parts.append(f"Item:{self.item_id}")

        for key, value in self.extra_context.items():
            parts.append(f"{key}:{value}")

        return ".".join(parts)

    def _log_start(self):
        context = self._get_context_str()
        self.logger.debug(f"[{context}] Starting operation")

    def _log_success(self, duration: float):
        context = self._get_context_str()
        if duration > logging_manager._slow_operation_threshold:
            self.logger.warning(f"[{context}] Slow operation completed in {duration:.2f}s")
        else:
            self.logger.info(f"[{context}] Operation completed in {duration:.2f}s")

    def _log_error(self, error: Exception, duration: float, tb):
        context = self._get_context_str()
        self.logger.error(f"[{context}] Operation failed in {duration:.2f}s: {str(error)}")
        self.logger.debug(f"[{context}] Traceback: {''.join(traceback.format_tb(tb))}")


def log_execution(module: str, operation: str = None):
    """Decorator wrapping a sync or async callable in a LogContext"""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with LogContext(module, operation or func.__name__,
                            **_extract_context_from_kwargs(kwargs)):
                return func(*args, **kwargs)

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with LogContext(module, operation or func.__name__,
                            **_extract_context_from_kwargs(kwargs)):
                return await func(*args, **kwargs)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def _extract_context_from_kwargs(kwargs: dict) -> Dict[str, Any]:
    context = {}
    if 'process_id' in kwargs:
        context['process_id'] = kwargs['process_id']
    if 'item_id' in kwargs:
        context['item_id'] = kwargs['item_id']
    return context


# Global manager
logging_manager = LoggingManager()


class ModuleLoggers:
    """Named loggers per subsystem"""

    ResearchManager = logging_manager.get_logger("ResearchManager")
    Storage = logging_manager.get_logger("Storage")
    API = logging_manager.get_logger("API")
    Pricing = logging_manager.get_logger("Pricing")
    Importer = logging_manager.get_logger("Importer")
    Report = logging_manager.get_logger("Report")
    Config = logging_manager.get_logger("Config")

    @classmethod
    def get_logger(cls, module_name: str):
        return logging_manager.get_logger(module_name)


rm_logger = ModuleLoggers.ResearchManager
db_logger = ModuleLoggers.Storage
api_logger = ModuleLoggers.API
pricing_logger = ModuleLoggers.Pricing
importer_logger = ModuleLoggers.Importer
report_logger = ModuleLoggers.Report
config_logger = ModuleLoggers.Config


def initialize_logging(use_config_file: bool = True):
    """Initialise logging, falling back to defaults if the config is unusable"""
    try:
        if use_config_file:
            logging_manager.configure_from_config_file()
        else:
            logging_manager.configure()

        logger.info("Logging system initialized successfully")
        return True

    except Exception as e:
        if use_config_file:
            print(f"Failed to initialize logging from config: {e}; falling back to defaults")
            logging_manager.configure()
            logger.info("Logging system initialized with fallback config")
            return True

        raise PriceResearchError(
            f"Failed to initialize logging: {str(e)}",
            ErrorCodes.CONFIG_INVALID_FORMAT
        ) from e


initialize_logging(use_config_file=True)
