"""Tests for devsetup.utils module."""
import logging
from unittest.mock import patch

from devsetup import utils


def test_command_exists_when_command_found():
    """Test command_exists returns True when command is found."""
    with patch('shutil.which', return_value='/usr/bin/git'):
        assert utils.command_exists('git') is True


def test_command_exists_when_command_not_found():
    """Test command_exists returns False when command not found."""
    with patch('shutil.which', return_value=None):
        assert utils.command_exists('nonexistent') is False


def test_is_root_when_root():
    """Test is_root returns True when running as root."""
    with patch('os.geteuid', return_value=0, create=True):
        assert utils.is_root() is True


def test_is_root_when_not_root():
    """Test is_root returns False when not running as root."""
    with patch('os.geteuid', return_value=1000, create=True):
        assert utils.is_root() is False


def test_get_real_home_when_sudo():
    """Test get_real_home returns sudo user's home."""
    with patch.dict('os.environ', {'SUDO_USER': 'testuser'}):
        with patch('os.path.expanduser', return_value='/home/testuser'):
            assert utils.get_real_home() == '/home/testuser'


def test_get_real_home_when_not_sudo():
    """Test get_real_home returns current user's home."""
    with patch.dict('os.environ', {'HOME': '/home/normaluser'}, clear=True):
        assert utils.get_real_home() == '/home/normaluser'


def test_is_wsl_from_environment():
    with patch.dict('os.environ', {'WSL_DISTRO_NAME': 'Ubuntu'}):
        assert utils.is_wsl() is True


def test_is_wsl_from_kernel_version():
    with patch.dict('os.environ', {}, clear=True):
        with patch('devsetup.utils.Path.read_text', return_value="Linux version 5.15.153.1-microsoft-standard-WSL2"):
            assert utils.is_wsl() is True


def test_not_wsl():
    with patch.dict('os.environ', {}, clear=True):
        with patch('devsetup.utils.Path.read_text', side_effect=OSError):
            assert utils.is_wsl() is False


def test_log_file_lines(tmp_path):
    """Every log line carries a timestamp and a level tag."""
    log_file = utils.setup_logging(log_file=tmp_path / "run.log")

    utils.log_info("Checking internet connection...")
    utils.log_success("git has been installed successfully")
    utils.log_warning("optimized for Ubuntu 24.04")
    utils.log_error("bat installation failed")
    utils.log_header("STEP 1/6: CHECKING SYSTEM REQUIREMENTS")
    utils.log_skip("zsh is already installed")

    lines = log_file.read_text().splitlines()
    levels = [line.split(": [", 1)[1].split("]", 1)[0] for line in lines]
    assert levels == ["INFO", "SUCCESS", "WARNING", "ERROR", "HEADER", "SKIP"]
    assert lines[0].endswith("[INFO] Checking internet connection...")
    assert lines[0][:4].isdigit()


def test_log_action_is_indented(tmp_path):
    log_file = utils.setup_logging(log_file=tmp_path / "run.log")

    utils.log_action("Installing package")

    assert log_file.read_text().rstrip().endswith("[INFO]   -> Installing package")


def test_console_output(capsys):
    utils.setup_logging()

    utils.log_info("Test message")
    utils.log_header("STEP 2/6: ESSENTIAL PACKAGES")

    out = capsys.readouterr().out
    assert "[INFO] Test message" in out
    assert "║ STEP 2/6: ESSENTIAL PACKAGES" in out


def test_setup_logging_verbose(capsys):
    """Debug output reaches the console only in verbose mode."""
    utils.setup_logging(verbose=False)
    utils.log_debug("hidden")
    utils.setup_logging(verbose=True)
    utils.log_debug("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_setup_logging_replaces_handlers(tmp_path):
    utils.setup_logging(log_file=tmp_path / "a.log")
    utils.setup_logging(log_file=tmp_path / "b.log")

    assert len(logging.getLogger(utils.LOGGER_NAME).handlers) == 2


def test_multi_line_message_prefixes_every_line(tmp_path):
    """Command output spanning several lines keeps one prefix per line."""
    log_file = utils.setup_logging(log_file=tmp_path / "run.log")

    utils.log_debug("Reading package lists...\nBuilding dependency tree...\n")
    utils.log_info("done")

    lines = log_file.read_text().splitlines()
    assert len(lines) == 3
    assert lines[0].endswith("[DEBUG] Reading package lists...")
    assert lines[1].endswith("[DEBUG] Building dependency tree...")
    assert all(line[:4].isdigit() and ": [" in line for line in lines)
