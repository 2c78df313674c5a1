"""Tests for CLI formatting helpers and argument handling."""

import pytest

from cli import commands
from cli.main import _pop_option
from cli.utils import format_file_size, format_progress, resume_key


@pytest.mark.parametrize('size, expected', [
    (0, '0 B'),
    (512, '512 B'),
    (1536, '1.50 KiB'),
    (5 * 1024 * 1024, '5.00 MiB'),
    (3 * 1024 ** 4, '3.00 TiB'),
    (2 * 1024 ** 5, '2.00 PiB'),
])
def test_format_file_size(size, expected):
    """Test binary unit selection."""
    assert format_file_size(size) == expected


def test_format_progress():
    """Test progress text includes both sizes and the percentage."""
    assert format_progress(512, 1024) == '512 B / 1.00 KiB (50.0%)'
    assert format_progress(0, 0).endswith('(0.0%)')


def test_resume_key_is_absolute(tmp_path, monkeypatch):
    """Test relative and absolute spellings of a path share one key."""
    monkeypatch.chdir(tmp_path)

    assert resume_key('a.bin') == resume_key(tmp_path / 'a.bin')
    assert resume_key('a.bin').startswith(str(tmp_path.resolve()))


def test_pop_option():
    """Test option values are extracted and removed from argv."""
    args = ['--config', '/tmp/c.json', '--other']

    assert _pop_option(args, '--config') == '/tmp/c.json'
    assert args == ['--other']
    assert _pop_option(args, '--config') is None


def test_pop_option_missing_value():
    """Test a trailing option without a value exits."""
    with pytest.raises(SystemExit):
        _pop_option(['--config'], '--config')


def test_set_config_path(tmp_path, monkeypatch):
    """Test the shared client is rebuilt from the chosen config file."""
    monkeypatch.setattr(commands, '_client', None)
    monkeypatch.setattr(commands, '_config_path', commands.DEFAULT_CONFIG_PATH)
    config_path = tmp_path / 'alt' / 'config.json'

    commands.set_config_path(config_path)
    client = commands.get_client()

    assert client.config.config_path == config_path
    assert commands.get_client() is client
    client.close()
