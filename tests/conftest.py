"""Shared pytest fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient

from cli.config import Config
from upload_server.chunk_writer import ChunkWriter
from upload_server.config import ServerConfig
from upload_server.main import create_app
from upload_server.repositories.session_repository import SessionRepository
from upload_server.services.upload_service import UploadService

TEST_USERNAME = 'tester'
TEST_PASSWORD = 'correct-horse'
TEST_SECRET = 'test-secret-key'


@pytest.fixture
def server_config(tmp_path):
    """
    Server configuration rooted in a temporary upload directory.

    Cleanup is disabled so tests drive the janitor explicitly.
    """
    return ServerConfig(
        upload_dir=tmp_path / 'uploads',
        secret_key=TEST_SECRET,
        token_expiration_seconds=600,
        max_chunk_bytes=1024,
        cors_origins=('http://localhost:3000',),
        admin_username=TEST_USERNAME,
        admin_password=TEST_PASSWORD,
        admin_password_hash=None,
        enable_cleanup=False,
    )


@pytest.fixture
def app(server_config):
    """Create upload server app bound to the temporary directory."""
    return create_app(server_config)


@pytest.fixture
def client(app):
    """Create FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def auth_headers(client):
    """
    Log in as the configured user and build the Authorization header.

    Returns:
        Dict with a valid bearer token
    """
    response = client.post('/login', data={'username': TEST_USERNAME, 'password': TEST_PASSWORD})
    assert response.status_code == 200
    return {'Authorization': f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def upload_service(tmp_path):
    """Upload service over temporary metadata and byte image directories."""
    service = UploadService(
        session_repo=SessionRepository(tmp_path / 'meta'),
        chunk_writer=ChunkWriter(tmp_path / 'files'),
        max_chunk_bytes=1024,
    )
    service.ensure_directories()
    return service


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .resumable-uploads directory
    """
    config_dir = tmp_path / '.resumable-uploads'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to a 26-byte file
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(b'abcdefghijklmnopqrstuvwxyz')
    return file_path


@pytest.fixture
def send_chunk(client, auth_headers):
    """
    Build a helper that uploads data as the chunk starting at start.

    Returns:
        Callable (file_id, data, start, total) -> response
    """
    def _send(file_id, data, start, total):
        end = start + len(data) - 1
        headers = dict(auth_headers)
        headers['Content-Range'] = f'bytes {start}-{end}/{total}'
        return client.post(
            '/upload_chunk',
            params={'file_id': file_id},
            headers=headers,
            files={'chunk': ('blob', data, 'application/octet-stream')},
        )

    return _send
