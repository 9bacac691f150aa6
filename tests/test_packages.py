"""Tests for the package manager variants."""
import os
from unittest.mock import call, patch

import pytest
import sh

from devsetup.packages import (
    HOMEBREW_INSTALL_URL,
    Apt,
    Brew,
    Choco,
    Dnf,
    Winget,
    get_package_manager,
)


def command_error(cmd="apt-get install -y foo", stderr=b"E: Unable to locate package foo"):
    return sh.ErrorReturnCode_1(cmd, b"", stderr)


class TestApt:
    """Tests for the apt variant."""

    @patch('devsetup.packages.run_command')
    def test_is_installed_uses_dpkg(self, mock_run):
        mock_run.return_value = "Status: install ok installed"

        assert Apt().is_installed("git") is True
        mock_run.assert_called_once_with("dpkg", "-s", "git")

    @patch('devsetup.packages.run_command')
    def test_is_installed_false_on_non_zero_exit(self, mock_run):
        mock_run.side_effect = command_error("dpkg -s foo", b"package 'foo' is not installed")

        assert Apt().is_installed("foo") is False

    @patch('devsetup.packages.is_root', return_value=False)
    @patch('devsetup.packages.run_command')
    def test_install_uses_sudo_when_not_root(self, mock_run, mock_root):
        mock_run.return_value = ""

        assert Apt().install("fd") is True
        mock_run.assert_called_once_with("sudo", "apt-get", "install", "-y", "fd-find")

    @patch('devsetup.packages.is_root', return_value=True)
    @patch('devsetup.packages.run_command')
    def test_install_without_sudo_as_root(self, mock_run, mock_root):
        mock_run.return_value = ""

        Apt().install("git")

        mock_run.assert_called_once_with("apt-get", "install", "-y", "git")

    @patch('devsetup.packages.log_error')
    @patch('devsetup.packages.is_root', return_value=True)
    @patch('devsetup.packages.run_command')
    def test_install_failure_returns_false(self, mock_run, mock_root, mock_log_error):
        mock_run.side_effect = command_error()

        assert Apt().install("foo") is False
        mock_log_error.assert_called_once_with("apt could not install foo: E: Unable to locate package foo")

    @patch('devsetup.packages.is_root', return_value=True)
    @patch('devsetup.packages.run_command')
    def test_update(self, mock_run, mock_root):
        mock_run.return_value = ""

        assert Apt().update() is True
        mock_run.assert_called_once_with("apt-get", "update")


class TestOtherManagers:
    """Tests for the command lines of the remaining variants."""

    @patch('devsetup.packages.is_root', return_value=True)
    @patch('devsetup.packages.run_command')
    def test_dnf_install(self, mock_run, mock_root):
        mock_run.return_value = ""

        Dnf().install("ripgrep")

        mock_run.assert_called_once_with("dnf", "install", "-y", "--skip-unavailable", "ripgrep")

    @patch('devsetup.packages.run_command')
    def test_dnf_probe_uses_rpm(self, mock_run):
        Dnf().is_installed("fd")

        mock_run.assert_called_once_with("rpm", "-q", "fd-find")

    @patch('devsetup.packages.run_command')
    def test_brew_never_uses_sudo(self, mock_run):
        mock_run.return_value = ""

        Brew().install("jq")

        mock_run.assert_called_once_with("brew", "install", "jq")

    @patch('devsetup.packages.run_command')
    def test_winget_maps_package_ids(self, mock_run):
        mock_run.return_value = ""

        Winget().install("ripgrep")

        mock_run.assert_called_once_with(
            "winget", "install", "--id", "BurntSushi.ripgrep.MSVC", "-e",
            "--accept-source-agreements", "--accept-package-agreements",
        )

    @patch('devsetup.packages.run_command')
    def test_choco_probe_reads_listing(self, mock_run):
        mock_run.side_effect = ["git|2.45.0\n", ""]
        choco = Choco()

        assert choco.is_installed("git") is True
        assert choco.is_installed("jq") is False

    @patch('devsetup.packages.run_command')
    def test_missing_manager_means_not_installed(self, mock_run):
        mock_run.side_effect = sh.CommandNotFound("brew")

        assert Brew().is_installed("git") is False

    @patch('devsetup.packages.run_command')
    def test_missing_choco_means_not_installed(self, mock_run):
        mock_run.side_effect = sh.CommandNotFound("choco")

        assert Choco().is_installed("git") is False


class TestHomebrewBootstrap:
    """Tests for installing Homebrew itself."""

    @patch('devsetup.packages.command_exists', return_value=True)
    @patch('devsetup.packages.log_action')
    @patch('devsetup.packages.run_command')
    def test_bootstrap_pipes_script_to_bash(self, mock_run, mock_log_action, mock_exists):
        mock_run.side_effect = ["install script content", ""]

        assert Brew().bootstrap() is True

        mock_log_action.assert_called_with("Homebrew not found. Installing Homebrew...")
        assert mock_run.call_args_list == [
            call("curl", "-fsSL", HOMEBREW_INSTALL_URL),
            call("bash", "-c", "install script content"),
        ]

    @patch('devsetup.packages.run_command')
    def test_bootstrap_failure_propagates(self, mock_run):
        mock_run.side_effect = command_error("curl -fsSL ...", b"could not resolve host")

        with pytest.raises(sh.ErrorReturnCode):
            Brew().bootstrap()

    @patch('devsetup.packages.command_exists', return_value=False)
    @patch('devsetup.packages.run_command')
    def test_bootstrap_puts_brew_on_path(self, mock_run, mock_exists, tmp_path):
        apple_silicon = tmp_path / "opt" / "homebrew" / "bin"
        apple_silicon.mkdir(parents=True)
        (apple_silicon / "brew").touch()
        mock_run.side_effect = ["install script content", ""]
        brew = Brew()
        brew.prefixes = (str(apple_silicon), str(tmp_path / "usr" / "local" / "bin"))

        with patch.dict('os.environ', {'PATH': '/usr/bin:/bin'}):
            brew.bootstrap()
            assert os.environ['PATH'] == f"{apple_silicon}:/usr/bin:/bin"

    @patch('devsetup.packages.command_exists', return_value=True)
    def test_path_untouched_when_brew_already_visible(self, mock_exists):
        with patch.dict('os.environ', {'PATH': '/opt/homebrew/bin:/usr/bin'}):
            Brew().add_to_path()
            assert os.environ['PATH'] == '/opt/homebrew/bin:/usr/bin'


class TestGetPackageManager:
    """Tests for manager selection."""

    def test_explicit_name(self):
        assert isinstance(get_package_manager("dnf"), Dnf)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown package manager 'pacman'"):
            get_package_manager("pacman")

    @patch('devsetup.packages.command_exists')
    @patch('devsetup.packages.platform.system')
    def test_linux_prefers_first_available(self, mock_platform, mock_exists):
        mock_platform.return_value = 'Linux'
        mock_exists.side_effect = lambda command: command == "dnf"

        assert isinstance(get_package_manager(), Dnf)

    @patch('devsetup.packages.command_exists', return_value=False)
    @patch('devsetup.packages.platform.system')
    def test_macos_returns_brew_even_when_missing(self, mock_platform, mock_exists):
        mock_platform.return_value = 'Darwin'

        assert isinstance(get_package_manager(), Brew)

    @patch('devsetup.packages.command_exists', return_value=False)
    @patch('devsetup.packages.platform.system')
    def test_linux_without_manager(self, mock_platform, mock_exists):
        mock_platform.return_value = 'Linux'

        with pytest.raises(RuntimeError, match="No supported package manager"):
            get_package_manager()

    @patch('devsetup.packages.platform.system')
    def test_unsupported_platform(self, mock_platform):
        mock_platform.return_value = 'SunOS'

        with pytest.raises(NotImplementedError, match="Platform SunOS is not supported"):
            get_package_manager()
