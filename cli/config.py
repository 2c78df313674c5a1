"""Configuration management for the upload CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_CHUNK_SIZE_BYTES, DEFAULT_SERVER_PORT
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("UPLOAD_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("UPLOAD_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
        "chunk_size": DEFAULT_CHUNK_SIZE_BYTES,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.resumable-uploads/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.resumable-uploads' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config = self.DEFAULT_CONFIG.copy()
        config["uploads"] = {}

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config file {self.config_path}, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError:
                    logger.warning(f"Could not back up config file to {backup_path}")
                return config

        self.data = config
        self.save()
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Failed to save config file {self.config_path}: {e}")

    def get_token(self) -> Optional[str]:
        """
        Get stored bearer token.

        Returns:
            Token string or None if not logged in
        """
        return self.data.get('access_token')

    def set_token(self, token: str) -> None:
        """
        Set bearer token and save to file.

        Args:
            token: Access token returned by /login
        """
        self.data['access_token'] = token
        self.save()

    def get_base_url(self) -> str:
        """
        Get upload server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8080")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', DEFAULT_SERVER_PORT)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.
        """
        return self.data.get('timeout', 30)

    def get_chunk_size(self) -> int:
        """
        Get the number of bytes sent per chunk.
        """
        return self.data.get('chunk_size', DEFAULT_CHUNK_SIZE_BYTES)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }

    def get_saved_upload(self, file_path: str) -> Optional[str]:
        """
        Get the file_id of an unfinished upload of file_path.
        """
        return self.data.get('uploads', {}).get(file_path)

    def save_upload(self, file_path: str, file_id: str) -> None:
        """
        Remember file_id so an interrupted upload of file_path can resume.
        """
        self.data.setdefault('uploads', {})[file_path] = file_id
        self.save()

    def forget_upload(self, file_path: str) -> None:
        """Drop the resume entry for file_path."""
        if self.data.get('uploads', {}).pop(file_path, None) is not None:
            self.save()
