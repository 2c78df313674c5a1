"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.config import Config
from cli.models import DownloadCommand, LoginCommand, StatusCommand, UploadCommand
from cli.upload_client import UploadClient

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.resumable-uploads' / 'config.json'

_config_path: Path = DEFAULT_CONFIG_PATH
_client: Optional[UploadClient] = None


def set_config_path(config_path: Path) -> None:
    """Use config_path for the shared client; drops any client already created."""
    global _config_path, _client
    _config_path = config_path
    if _client is not None:
        _client.close()
        _client = None


def get_client() -> UploadClient:
    """
    Get or create global UploadClient instance.

    Returns:
        UploadClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new UploadClient instance")
        _client = UploadClient(Config(_config_path))
    return _client


def handle_login(cmd: LoginCommand, client: Optional[UploadClient] = None) -> str:
    """
    Handle 'login' command.

    Args:
        cmd: LoginCommand with username and password
        client: Optional UploadClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.login(cmd.username, cmd.password)


def handle_upload(cmd: UploadCommand, client: Optional[UploadClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_path and optional file_id
        client: Optional UploadClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing upload command: path={cmd.file_path} file_id={cmd.file_id}")
    if client is None:
        client = get_client()
    result = client.upload(cmd.file_path, cmd.file_id)
    logger.debug("Upload command completed")
    return result


def handle_status(cmd: StatusCommand, client: Optional[UploadClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.status(cmd.file_id)


def handle_download(cmd: DownloadCommand, client: Optional[UploadClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id, optional output_path and byte_range
        client: Optional UploadClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    logger.info(
        f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path} range={cmd.byte_range}"
    )
    if client is None:
        client = get_client()
    result = client.download(cmd.file_id, cmd.output_path, cmd.byte_range)
    logger.debug("Download command completed")
    return result
