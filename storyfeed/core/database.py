"""
Settings storage for storyfeed.
Holds the key/value configuration table; feed data is never stored here.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Any, Optional, Dict

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    'api_base_url': 'https://gaiadev.com.br',
    'stories_json_url': 'https://gaiadev.com.br/storiesJson',
    'media_base_url': 'https://nbapedroccm.s3.us-east-2.amazonaws.com/',
    'feed_backend': 'stories',
    'page_size': '30',
    'first_page_size': '30',
    'fetch_timeout_seconds': '30',
    'profiles_cache_ttl_seconds': '300',
    'scroll_margin_px': '20',
    'thumbnail_width': '200',
}


class DatabaseManager:
    """Manages the SQLite settings table"""

    VERSION = "1.0.0"

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize database manager

        Args:
            db_path: Path to SQLite database file. Defaults to ~/.storyfeed/settings.db
        """
        if db_path is None:
            db_path = Path.home() / ".storyfeed" / "settings.db"

        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self):
        """Establish database connection"""
        self.conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=30.0
        )
        self.conn.row_factory = sqlite3.Row
        self._initialize_schema()

    def _initialize_schema(self):
        """Create database schema if not exists"""
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self.conn.commit()
        self._set_default_config()

    def _set_default_config(self):
        """Set default configuration values"""
        defaults = dict(DEFAULT_CONFIG, app_version=self.VERSION)

        cursor = self.conn.cursor()
        for key, value in defaults.items():
            cursor.execute("""
                INSERT OR IGNORE INTO config (key, value)
                VALUES (?, ?)
            """, (key, value))
        self.conn.commit()

    def get_config(self, key: str, default: Any = None) -> Any:
        """
        Retrieve configuration value

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        cursor = self.conn.cursor()
        cursor.execute("""
            SELECT value FROM config WHERE key = ?
        """, (key,))

        row = cursor.fetchone()
        if row:
            return row['value']
        return default

    def set_config(self, key: str, value: Any):
        """
        Set configuration value

        Args:
            key: Configuration key
            value: Configuration value (stored as text)
        """
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT OR REPLACE INTO config (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
        """, (key, str(value)))
        self.conn.commit()

    def get_all_config(self) -> Dict[str, str]:
        """Get all configuration as dictionary"""
        cursor = self.conn.cursor()
        cursor.execute("SELECT key, value FROM config")
        return {row['key']: row['value'] for row in cursor.fetchall()}

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
