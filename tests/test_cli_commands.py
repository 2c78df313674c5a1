"""Tests for CLI command handlers."""

from unittest.mock import Mock

from cli.commands import handle_download, handle_login, handle_status, handle_upload
from cli.models import DownloadCommand, LoginCommand, StatusCommand, UploadCommand
from cli.repl import dispatch_command
from cli.upload_client import UploadClient


def test_handle_login():
    """Test login command handler with mocked client."""
    mock_client = Mock(spec=UploadClient)
    mock_client.login.return_value = "Login successful!"

    cmd = LoginCommand(username='testuser', password='password123')
    result = handle_login(cmd, client=mock_client)

    assert 'Login successful' in result
    mock_client.login.assert_called_once_with('testuser', 'password123')


def test_handle_upload():
    """Test upload command handler passes path and identifier."""
    mock_client = Mock(spec=UploadClient)
    mock_client.upload.return_value = "Uploaded: a.bin"

    result = handle_upload(UploadCommand(file_path='a.bin', file_id='f1'), client=mock_client)

    assert 'Uploaded' in result
    mock_client.upload.assert_called_once_with('a.bin', 'f1')


def test_handle_upload_without_identifier():
    """Test upload command handler lets the client choose the identifier."""
    mock_client = Mock(spec=UploadClient)
    mock_client.upload.return_value = "Uploaded"

    handle_upload(UploadCommand(file_path='a.bin'), client=mock_client)

    mock_client.upload.assert_called_once_with('a.bin', None)


def test_handle_status():
    """Test status command handler."""
    mock_client = Mock(spec=UploadClient)
    mock_client.status.return_value = "Upload f1: partial"

    result = handle_status(StatusCommand(file_id='f1'), client=mock_client)

    assert result == "Upload f1: partial"
    mock_client.status.assert_called_once_with('f1')


def test_handle_download():
    """Test download command handler passes output path and range."""
    mock_client = Mock(spec=UploadClient)
    mock_client.download.return_value = "Downloaded: f1"

    cmd = DownloadCommand(file_id='f1', output_path='out.bin', byte_range='0-9')
    result = handle_download(cmd, client=mock_client)

    assert 'Downloaded' in result
    mock_client.download.assert_called_once_with('f1', 'out.bin', '0-9')


def test_dispatch_routes_to_handler(monkeypatch):
    """Test the REPL dispatcher uses the shared client."""
    mock_client = Mock(spec=UploadClient)
    mock_client.status.return_value = "Upload f1: complete"
    monkeypatch.setattr('cli.commands._client', mock_client)

    assert dispatch_command(StatusCommand(file_id='f1')) == "Upload f1: complete"


def test_dispatch_unknown_type():
    """Test unknown command objects are reported."""
    assert 'Unknown command type' in dispatch_command(object())
