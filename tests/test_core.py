import re
import sys

import pytest

from gping.pinger.core import (
    HostnameError,
    NotSupportedError,
    PingCreationError,
    PingExited,
    Pinger,
    PingOptions,
    Pong,
    SpawnError,
    Timeout,
    Unknown,
    UnknownPingError,
    extract_regex,
    format_duration,
    run_ping,
)
from gping.pinger.target import IPVersion, Target

BSD_RE = re.compile(r"time=(?:(?P<ms>[0-9]+).(?P<ns>[0-9]+)\s+ms)")
OPTIONAL_FRACTION_RE = re.compile(r"time=(?P<ms>\d+)(?:\.(?P<ns>\d+))? *ms")


class ScriptPinger(Pinger):
    def __init__(self, options, script):
        super().__init__(options)
        self.script = script

    def parse(self, line):
        if line.startswith("no answer"):
            return Timeout(line)
        return extract_regex(OPTIONAL_FRACTION_RE, line)

    def ping_args(self):
        return sys.executable, ["-c", self.script]


def opts():
    return PingOptions.new("foo", 1)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0.012345, "12.345ms"),
        (1, "1s"),
        (1.5, "1.5s"),
        (0.0005, "500µs"),
        (0.000000007, "7ns"),
        (0, "0ns"),
        (0.02, "20ms"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_duration_negative():
    with pytest.raises(ValueError):
        format_duration(-1)


def test_result_display():
    assert str(Pong(0.0205, "x")) == "20.5ms"
    assert str(Timeout("x")) == "Timeout"
    assert str(Unknown("x")) == "Unknown"
    assert str(PingExited(1, "boom")) == "Exited(exit status: 1, boom)"


def test_ping_exited_success():
    assert PingExited(0, "").success is True
    assert PingExited(2, "").success is False


def test_extract_regex_with_fraction():
    line = "64 bytes from 1.2.3.4: icmp_seq=0 ttl=53 time=12.345 ms"
    result = extract_regex(BSD_RE, line)
    assert isinstance(result, Pong)
    assert result.line == line
    assert str(result) == "12.345ms"


def test_extract_regex_small_fraction():
    assert str(extract_regex(BSD_RE, "time=0.045 ms")) == "45µs"
    assert str(extract_regex(BSD_RE, "time=1.2 ms")) == "1.2ms"


def test_extract_regex_without_fraction():
    result = extract_regex(OPTIONAL_FRACTION_RE, "time=17 ms")
    assert str(result) == "17ms"


def test_extract_regex_no_match():
    assert extract_regex(BSD_RE, "PING foo (1.2.3.4): 56 data bytes") is None


def test_options_constructors():
    assert PingOptions.new("10.0.0.1", 0.5).target == Target.new_any("10.0.0.1")
    assert PingOptions.new_ipv4("foo", 0.5).target.version is IPVersion.V4
    assert PingOptions.new_ipv6("foo", 0.5, "eth0").interface == "eth0"
    options = PingOptions.from_target(Target.new_any("foo"), 2)
    assert options.interval == 2
    assert options.raw_arguments is None


def test_with_raw_arguments_copies():
    original = opts()
    updated = original.with_raw_arguments(["-c", 3])
    assert updated.raw_arguments == ("-c", "3")
    assert original.raw_arguments is None
    assert updated.target == original.target


def test_error_messages():
    assert str(UnknownPingError(stderr=["a"], stdout=["b", "c"])) == (
        'Could not detect ping. Stderr: ["a"]\nStdout: ["b", "c"]'
    )
    assert str(NotSupportedError("use another")) == "Installed ping is not supported: use another"
    assert str(HostnameError("foo")) == "Invalid or unresolvable hostname foo"
    assert str(SpawnError(OSError("nope"))) == "Error spawning ping: nope"


@pytest.mark.parametrize(
    "error, expected",
    [
        (UnknownPingError([], []), "Could not detect ping. Stderr: []\nStdout: []"),
        (NotSupportedError("x"), "Installed ping is not supported: x"),
        (HostnameError("x"), "Invalid or unresolvable hostname x"),
        (SpawnError(OSError("x")), "Error spawning ping: x"),
    ],
)
def test_errors_share_base(error, expected):
    assert isinstance(error, PingCreationError)
    assert str(error) == expected


def test_run_ping_sets_c_locale():
    child = run_ping(
        sys.executable,
        ["-c", "import os; print(os.environ['LANG'], os.environ['LC_ALL'])"],
    )
    stdout, _ = child.communicate()
    assert stdout.strip() == "C C"


def test_run_ping_missing_command():
    with pytest.raises(SpawnError):
        run_ping("this-command-does-not-exist-anywhere", [])


def test_from_options_keeps_options():
    options = opts()
    pinger = ScriptPinger(options, "")
    assert pinger.options is options


def test_start_streams_results_then_exit():
    script = (
        "import sys\n"
        "print('PING foo')\n"
        "print('64 bytes from foo: time=1.5 ms')\n"
        "print('no answer yet for icmp_seq=2')\n"
        "sys.stderr.write('oops')\n"
        "sys.exit(3)\n"
    )
    results = list(ScriptPinger(opts(), script).start())
    assert [str(r) for r in results] == ["1.5ms", "Timeout", "Exited(exit status: 3, oops)"]
    assert results[0].line == "64 bytes from foo: time=1.5 ms"
    assert results[-1] == PingExited(3, "oops")


def test_start_can_be_closed_early():
    script = "import time\nprint('time=2 ms', flush=True)\ntime.sleep(60)\n"
    stream = ScriptPinger(opts(), script).start()
    first = next(stream)
    stream.close()
    assert str(first) == "2ms"