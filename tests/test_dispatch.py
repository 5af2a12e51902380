import itertools
import sys
from unittest import mock

import pytest

from gping.pinger.bsd import BSDPinger
from gping.pinger.core import NotSupportedError, PingOptions, Pong
from gping.pinger.dispatch import get_pinger, ping
from gping.pinger.fake import FakePinger
from gping.pinger.linux import LinuxPinger, PingFlavour
from gping.pinger.macos import MacOSPinger


@pytest.fixture
def options():
    return PingOptions.new("foo", 0.0)


@pytest.fixture(autouse=True)
def no_fake(monkeypatch):
    monkeypatch.delenv("PINGER_FAKE_PING", raising=False)


def test_fake_env_selects_fake(monkeypatch, options):
    monkeypatch.setenv("PINGER_FAKE_PING", "1")
    pinger = get_pinger(options)
    assert isinstance(pinger, FakePinger)
    assert pinger.options == options


def test_fake_ping_stream(monkeypatch, options):
    monkeypatch.setenv("PINGER_FAKE_PING", "1")
    results = list(itertools.islice(ping(options), 3))
    assert len(results) == 3
    for result in results:
        assert isinstance(result, Pong)
        assert 0.05 <= result.duration < 0.15
        assert result.line.startswith("Fake ping line: ")


def test_fake_env_other_value_ignored(monkeypatch, options):
    monkeypatch.setenv("PINGER_FAKE_PING", "0")
    monkeypatch.setattr(sys, "platform", "darwin")
    pinger = get_pinger(options)
    assert isinstance(pinger, MacOSPinger)
    assert pinger.options == options
    assert pinger.ping_args()[0] == "ping"


@pytest.mark.parametrize("platform", ["freebsd13", "dragonfly6", "openbsd7", "netbsd9"])
def test_bsd_platforms(monkeypatch, options, platform):
    monkeypatch.setattr(sys, "platform", platform)
    pinger = get_pinger(options)
    assert isinstance(pinger, BSDPinger)
    assert pinger.options == options


def test_macos(monkeypatch, options):
    monkeypatch.setattr(sys, "platform", "darwin")
    pinger = get_pinger(options)
    assert isinstance(pinger, MacOSPinger)
    assert pinger.options == options
    assert pinger.ping_args()[0] == "ping"


def test_windows_not_supported(monkeypatch, options):
    monkeypatch.setattr(sys, "platform", "win32")
    with pytest.raises(NotSupportedError):
        get_pinger(options)


def test_linux_detects(monkeypatch, options):
    monkeypatch.setattr(sys, "platform", "linux")
    with mock.patch("subprocess.Popen") as popen:
        popen.return_value.communicate.return_value = ("", "BusyBox v1.36\n")
        pinger = get_pinger(options)
    assert isinstance(pinger, LinuxPinger)
    assert pinger.flavour is PingFlavour.BUSYBOX