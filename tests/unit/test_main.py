"""Tests for the DevTunnel command object."""

from unittest.mock import MagicMock

import pytest

from devtunnel.__main__ import DevTunnel
from devtunnel.exceptions import ConfigurationError


@pytest.fixture
def config_loader(tunnel_config) -> MagicMock:
    loader = MagicMock()
    loader.load_config.return_value = tunnel_config
    return loader


@pytest.fixture
def tunnel_factory() -> MagicMock:
    factory = MagicMock()
    factory.return_value.is_listening.return_value = True
    return factory


@pytest.fixture
def browser_factory() -> MagicMock:
    return MagicMock()


@pytest.fixture
def ec2_factory(fake_ec2_manager) -> MagicMock:
    return MagicMock(return_value=fake_ec2_manager)


@pytest.fixture
def devtunnel(config_loader, ec2_factory, tunnel_factory, browser_factory) -> DevTunnel:
    return DevTunnel(
        config_loader=config_loader,
        ec2_manager_factory=ec2_factory,
        tunnel_manager_factory=tunnel_factory,
        browser_launcher_factory=browser_factory,
    )


def test_start_opens_tunnel_and_browser(
    devtunnel, fake_ec2_manager, ec2_factory, tunnel_factory, browser_factory, no_sleep
) -> None:
    devtunnel.start()

    ec2_factory.assert_called_once_with("us-east-1")
    assert fake_ec2_manager.calls == [("start", "i-0123456789abcdef0")]
    tunnel_factory.assert_called_once_with(
        port=8157,
        username="ubuntu",
        key_file="/tmp/dev-server.pem",
        debug=False,
    )
    tunnel_factory.return_value.establish.assert_called_once_with("203.0.113.10")
    browser_factory.assert_called_once_with(
        command="google-chrome",
        port=8157,
        profile_dir="/tmp/chrome-with-proxy",
    )
    browser_factory.return_value.launch.assert_called_once_with(
        "http://intranet.example.com"
    )


def test_start_without_browser(devtunnel, browser_factory, no_sleep) -> None:
    devtunnel.start(browser=False)

    browser_factory.assert_not_called()


def test_start_debug_passes_through(devtunnel, tunnel_factory, no_sleep) -> None:
    devtunnel.start(debug=True)

    assert tunnel_factory.call_args[1]["debug"] is True


def test_stop(devtunnel, fake_ec2_manager, tunnel_factory, no_sleep) -> None:
    fake_ec2_manager.instances["i-0123456789abcdef0"]["state"] = "running"

    devtunnel.stop()

    assert fake_ec2_manager.calls == [("stop", "i-0123456789abcdef0")]
    tunnel_factory.return_value.clear_port.assert_called_once()
    tunnel_factory.return_value.establish.assert_not_called()


def test_status(devtunnel, fake_ec2_manager) -> None:
    report = devtunnel.status()

    assert report["name"] == "dev-server"
    assert report["state"] == "stopped"
    assert report["tunnel_listening"] is True
    assert fake_ec2_manager.calls == []


def test_config_loaded_once(devtunnel, config_loader) -> None:
    devtunnel.status()
    devtunnel.status()

    config_loader.load_config.assert_called_once()


def test_configuration_error_stops_before_cloud_calls(
    config_loader, ec2_factory, tunnel_factory, browser_factory
) -> None:
    config_loader.load_config.side_effect = ConfigurationError(
        ".env is missing the required `TUNNEL_NAME` key"
    )
    devtunnel = DevTunnel(
        config_loader=config_loader,
        ec2_manager_factory=ec2_factory,
        tunnel_manager_factory=tunnel_factory,
        browser_launcher_factory=browser_factory,
    )

    with pytest.raises(ConfigurationError, match="TUNNEL_NAME"):
        devtunnel.start()

    ec2_factory.assert_not_called()
    tunnel_factory.assert_not_called()


def test_default_collaborators() -> None:
    from devtunnel.core.config import ConfigLoader
    from devtunnel.providers.aws.compute import EC2Manager
    from devtunnel.services.browser import BrowserLauncher
    from devtunnel.services.tunnel import SocksTunnelManager

    devtunnel = DevTunnel()

    assert isinstance(devtunnel._config_loader, ConfigLoader)
    assert devtunnel._ec2_manager_factory is EC2Manager
    assert devtunnel._tunnel_manager_factory is SocksTunnelManager
    assert devtunnel._browser_launcher_factory is BrowserLauncher
