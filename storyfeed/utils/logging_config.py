"""
Centralized logging configuration with categorized loggers.

This module provides:
- Named categories for the library's subsystems
- Per-category log level control
- Persistent levels via the settings database
"""
import logging
from typing import Dict, Optional
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler


class LoggerCategory:
    """Named categories for library loggers"""
    CORE = "core"            # Context, settings, cache
    API = "api"              # Profile listing client
    NETWORK = "network"      # HTTP sessions
    FEED = "feed"            # Sources, pagination state, coordinator, trigger
    UI = "ui"                # View models and Qt adapters
    DATABASE = "database"    # Settings storage


DEFAULT_LOG_LEVELS = {
    LoggerCategory.CORE: logging.INFO,
    LoggerCategory.API: logging.INFO,
    LoggerCategory.NETWORK: logging.INFO,
    LoggerCategory.FEED: logging.INFO,
    LoggerCategory.UI: logging.WARNING,  # Reduce scroll noise
    LoggerCategory.DATABASE: logging.WARNING,
}


MODULE_TO_CATEGORY = {
    # Core
    'storyfeed.core': LoggerCategory.CORE,
    'storyfeed.core.context': LoggerCategory.CORE,
    'storyfeed.core.cache': LoggerCategory.CORE,
    'storyfeed.core.settings': LoggerCategory.CORE,
    'storyfeed.core.profiles_manager': LoggerCategory.CORE,

    # API
    'storyfeed.core.api': LoggerCategory.API,
    'storyfeed.core.api.base': LoggerCategory.API,
    'storyfeed.core.api.profiles': LoggerCategory.API,

    # Network
    'storyfeed.core.http_client': LoggerCategory.NETWORK,

    # Feed engine
    'storyfeed.core.sources': LoggerCategory.FEED,
    'storyfeed.core.sources.base': LoggerCategory.FEED,
    'storyfeed.core.sources.cursor_api': LoggerCategory.FEED,
    'storyfeed.core.sources.flat_list': LoggerCategory.FEED,
    'storyfeed.core.feed_state': LoggerCategory.FEED,
    'storyfeed.core.coordinator': LoggerCategory.FEED,
    'storyfeed.core.scroll_trigger': LoggerCategory.FEED,
    'storyfeed.core.gallery_feed': LoggerCategory.FEED,

    # UI
    'storyfeed.ui': LoggerCategory.UI,
    'storyfeed.ui.common': LoggerCategory.UI,
    'storyfeed.ui.gallery': LoggerCategory.UI,
    'storyfeed.ui.gallery.scroll_boundary': LoggerCategory.UI,

    # Database
    'storyfeed.core.database': LoggerCategory.DATABASE,
}


class LoggingManager:
    """Manages library-wide logging configuration"""

    def __init__(self, log_dir: Optional[Path] = None, db_manager=None):
        """
        Initialize logging manager.

        Args:
            log_dir: Directory for log files
            db_manager: Database manager for persistent configuration
        """
        self.log_dir = log_dir or (Path.home() / ".storyfeed" / "logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.db_manager = db_manager
        self._category_levels: Dict[str, int] = {}
        self._load_levels_from_db()

    def _load_levels_from_db(self):
        """Load log levels from database configuration"""
        if not self.db_manager:
            self._category_levels = DEFAULT_LOG_LEVELS.copy()
            return

        for category, default_level in DEFAULT_LOG_LEVELS.items():
            config_key = f'log_level_{category}'
            level_name = self.db_manager.get_config(config_key, logging.getLevelName(default_level))
            level = logging.getLevelName(str(level_name).upper())
            if isinstance(level, int):
                self._category_levels[category] = level
            else:
                self._category_levels[category] = default_level

    def get_category_level(self, category: str) -> int:
        """Get log level for a category"""
        return self._category_levels.get(category, logging.INFO)

    def set_category_level(self, category: str, level: int):
        """Set log level for a category"""
        self._category_levels[category] = level
        if self.db_manager:
            config_key = f'log_level_{category}'
            self.db_manager.set_config(config_key, logging.getLevelName(level))

        self._apply_category_level(category, level)

    def _apply_category_level(self, category: str, level: int):
        """Apply level to all loggers in a category"""
        for module_name, cat in MODULE_TO_CATEGORY.items():
            if cat == category:
                logging.getLogger(module_name).setLevel(level)

    def setup_logging(self, root_level: int = logging.INFO):
        """
        Setup logging with categories.

        Args:
            root_level: Root logger level (default: INFO)
        """
        log_file = self.log_dir / "storyfeed.log"

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        file_handler = TimedRotatingFileHandler(
            log_file,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(root_level)

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(stream_handler)

        for category, level in self._category_levels.items():
            self._apply_category_level(category, level)

        # Silence noisy third-party loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)
        logging.getLogger('aiohttp').setLevel(logging.WARNING)
        logging.getLogger('asyncio').setLevel(logging.WARNING)

    def get_all_levels(self) -> Dict[str, int]:
        """Get all category log levels"""
        return self._category_levels.copy()


# Global instance
_logging_manager: Optional[LoggingManager] = None


def get_logging_manager(db_manager=None, log_dir: Optional[Path] = None) -> LoggingManager:
    """Get or create the global logging manager"""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager(log_dir=log_dir, db_manager=db_manager)
    return _logging_manager


def setup_logging(db_manager=None, log_dir: Optional[Path] = None):
    """Setup logging (convenience function)"""
    manager = get_logging_manager(db_manager, log_dir=log_dir)
    manager.setup_logging()
    return manager
