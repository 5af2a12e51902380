"""Command line entry point: ping hosts or time commands and graph the results."""

from __future__ import annotations

import argparse
import contextlib
import dataclasses
import enum
import os
import queue
import signal
import socket
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import Iterable, Sequence

import blessed
import idna

from gping.app import App
from gping.colors import Colors
from gping.pinger.core import (
    PingCreationError,
    PingExited,
    PingOptions,
    PingResult,
    Pong,
    Timeout,
    Unknown,
)
from gping.pinger.dispatch import ping
from gping.plot_data import PlotData
from gping.region_map import try_host_from_cloud_region

VERSION = "1.19.0"
PROG = "gping"
ABOUT = "Ping, but with a graph."

_SUPPORTS_PING_FLAGS = sys.platform != "win32"
_PING_ARGS_FLAG = "--ping-args"
_RENDER_PERIOD = 0.25
_KEY_POLL = 0.5
_DEFAULT_PING_INTERVAL = 0.2
_DEFAULT_CMD_INTERVAL = 0.5

_COLOR_HELP = """Assign color to a graph entry.

This option can be defined more than once as a comma separated string, and the
order which the colors are provided will be matched against the hosts or
commands passed to gping.

Hexadecimal RGB color codes are accepted in the form of '#RRGGBB' or the
following color names: 'black', 'red', 'green', 'yellow', 'blue', 'magenta',
'cyan', 'gray', 'dark-gray', 'light-red', 'light-green', 'light-yellow',
'light-blue', 'light-magenta', 'light-cyan', and 'white'"""


class UpdateKind(enum.Enum):
    """What a worker reports about one host or command."""

    RESULT = "result"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"
    TERMINATED = "terminated"


@dataclasses.dataclass(frozen=True)
class Update:
    """A measurement (seconds), a timeout, an unknown line or the end of ping."""

    kind: UpdateKind
    duration: float | None = None
    returncode: int | None = None
    stderr: str = ""

    @classmethod
    def from_ping_result(cls, result: PingResult) -> Update:
        if isinstance(result, Pong):
            return cls(UpdateKind.RESULT, duration=result.duration)
        if isinstance(result, Timeout):
            return cls(UpdateKind.TIMEOUT)
        if isinstance(result, Unknown):
            return cls(UpdateKind.UNKNOWN)
        if isinstance(result, PingExited):
            return cls(UpdateKind.TERMINATED, returncode=result.returncode, stderr=result.stderr)
        raise TypeError(f"not a ping result: {result!r}")


class EventKind(enum.Enum):
    UPDATE = "update"
    TERMINATE = "terminate"
    RENDER = "render"


@dataclasses.dataclass(frozen=True)
class Event:
    """A message to the main loop."""

    kind: EventKind
    host_id: int | None = None
    update: Update | None = None


class _Worker(threading.Thread):
    """A daemon thread that keeps the exception its target raised, if any."""

    def __init__(self, target, name: str):
        super().__init__(name=name, daemon=True)
        self._work = target
        self.error: BaseException | None = None

    def run(self) -> None:
        try:
            self._work()
        except BaseException as exc:  # reported by the main thread after join
            self.error = exc


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for the ``gping`` command."""
    parser = argparse.ArgumentParser(prog=PROG, description=ABOUT)
    parser.add_argument("--version", "-V", action="version", version=f"{PROG} {VERSION}")
    parser.add_argument(
        "--cmd",
        action="store_true",
        help="Graph the execution time for a list of commands rather than pinging hosts",
    )
    parser.add_argument(
        "-n",
        "--watch-interval",
        type=float,
        default=None,
        help="Watch interval seconds (provide partial seconds like '0.5'). "
        "Default for ping is 0.2, default for cmd is 0.5.",
    )
    parser.add_argument(
        "hosts_or_commands",
        nargs="*",
        help="Hosts or IPs to ping, or commands to run if --cmd is provided. "
        "Can use cloud shorthands like aws:eu-west-1.",
    )
    parser.add_argument(
        "-b",
        "--buffer",
        type=int,
        default=30,
        help="Determines the number of seconds to display in the graph.",
    )
    family = parser.add_mutually_exclusive_group()
    family.add_argument(
        "-4", dest="ipv4", action="store_true", help="Resolve ping targets to IPv4 address"
    )
    family.add_argument(
        "-6", dest="ipv6", action="store_true", help="Resolve ping targets to IPv6 address"
    )
    if _SUPPORTS_PING_FLAGS:
        parser.add_argument("-i", "--interface", default=None, help="Interface to use when pinging.")
    parser.add_argument(
        "-s",
        "--simple-graphics",
        action="store_true",
        help="Uses dot characters instead of braille",
    )
    parser.add_argument(
        "--vertical-margin",
        type=int,
        default=1,
        help="Vertical margin around the graph (top and bottom)",
    )
    parser.add_argument(
        "--horizontal-margin",
        type=int,
        default=0,
        help="Horizontal margin around the graph (left and right)",
    )
    parser.add_argument(
        "-c", "--color", action="append", default=[], metavar="COLOR", help=_COLOR_HELP
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear the graph from the terminal after closing the program",
    )
    if _SUPPORTS_PING_FLAGS:
        parser.add_argument(
            _PING_ARGS_FLAG,
            nargs="*",
            default=None,
            metavar="ARG",
            help="Extra arguments to pass to `ping`. These are platform dependent. "
            "Everything after this flag is passed on.",
        )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the command line; every argument after ``--ping-args`` goes to ping."""
    tokens = list(sys.argv[1:] if argv is None else argv)
    ping_args = None
    if _SUPPORTS_PING_FLAGS and _PING_ARGS_FLAG in tokens:
        split = tokens.index(_PING_ARGS_FLAG)
        tokens, ping_args = tokens[:split], tokens[split + 1 :]

    parser = build_parser()
    args = parser.parse_args(tokens)
    args.color = [part for value in args.color for part in value.split(",")]
    if _SUPPORTS_PING_FLAGS:
        args.ping_args = ping_args
        if args.cmd and ping_args is not None:
            parser.error("argument --ping-args: not allowed with argument --cmd")
    else:
        args.interface = None
        args.ping_args = None
    if args.buffer < 0:
        parser.error("argument -b/--buffer: must not be negative")
    if args.vertical_margin < 0 or args.horizontal_margin < 0:
        parser.error("margins must not be negative")
    return args


def get_host_ipaddr(host: str, force_ipv4: bool, force_ipv6: bool) -> str:
    """Resolve ``host`` to an IP address, optionally restricted to one family."""
    if not host.isascii():
        try:
            host = idna.encode(host, uts46=True).decode("ascii")
        except idna.IDNAError as exc:
            raise ValueError(f"Could not encode host {host} to punycode") from exc
    try:
        infos = socket.getaddrinfo(host, 80)
    except (socket.gaierror, UnicodeError) as exc:
        raise ValueError(f"Resolving {host}: {exc}") from exc
    addresses = [(family, sockaddr[0]) for family, _, _, _, sockaddr in infos]
    if not addresses:
        raise ValueError(f"Could not resolve hostname {host}")

    if force_ipv4:
        wanted, label = (socket.AF_INET,), "IPv4"
    elif force_ipv6:
        wanted, label = (socket.AF_INET6,), "IPv6"
    else:
        wanted, label = None, "IP"
    for family, address in addresses:
        if wanted is None or family in wanted:
            return address
    raise ValueError(f"Could not resolve '{host}' to {label}")


def start_render_thread(kill_event: threading.Event, events: queue.Queue) -> _Worker:
    """Ask the main loop to redraw four times a second until killed."""

    def work() -> None:
        while not kill_event.is_set():
            kill_event.wait(_RENDER_PERIOD)
            events.put(Event(EventKind.RENDER))

    worker = _Worker(work, "render")
    worker.start()
    return worker


def _interval(value: float | None, default: float) -> float:
    seconds = default if value is None else value
    return max(0, int(seconds * 1000)) / 1000


def start_cmd_thread(
    watch_cmd: str,
    host_id: int,
    watch_interval: float | None,
    events: queue.Queue,
    kill_event: threading.Event,
) -> _Worker:
    """Run ``watch_cmd`` repeatedly and report how long each run took."""
    words = watch_cmd.split()
    if not words:
        raise ValueError("Must specify a command to watch")
    interval = _interval(watch_interval, _DEFAULT_CMD_INTERVAL)

    def work() -> None:
        while not kill_event.is_set():
            start = time.monotonic()
            completed = subprocess.run(
                words, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False
            )
            duration = time.monotonic() - start
            if completed.returncode == 0:
                update = Update(UpdateKind.RESULT, duration=duration)
            else:
                update = Update(UpdateKind.TIMEOUT)
            events.put(Event(EventKind.UPDATE, host_id, update))
            kill_event.wait(interval)

    worker = _Worker(work, f"cmd-{host_id}")
    worker.start()
    return worker


def start_ping_thread(
    options: PingOptions,
    host_id: int,
    events: queue.Queue,
    kill_event: threading.Event,
) -> _Worker:
    """Start ping now and forward its results to the main loop."""
    stream = ping(options)

    def work() -> None:
        with contextlib.closing(stream):
            for result in stream:
                if kill_event.is_set():
                    return
                events.put(Event(EventKind.UPDATE, host_id, Update.from_ping_result(result)))

    worker = _Worker(work, f"ping-{host_id}")
    worker.start()
    return worker


def _roff_escape(line: str) -> str:
    text = line.replace("\\", "\\e").replace("-", "\\-")
    if text.startswith((".", "'")):
        text = "\\&" + text
    return text


def generate_man_page(path: str | os.PathLike) -> None:
    """Write a roff man page for the command to ``path``."""
    parser = build_parser()
    lines = [
        f'.TH {PROG.upper()} 1 "" "{PROG}" "User Commands"',
        ".SH NAME",
        f"{PROG} \\- {_roff_escape(ABOUT)}",
        ".SH SYNOPSIS",
        ".nf",
        *(_roff_escape(line) for line in parser.format_usage().rstrip().splitlines()),
        ".fi",
        ".SH DESCRIPTION",
        ".nf",
        *(_roff_escape(line) for line in parser.format_help().rstrip().splitlines()),
        ".fi",
    ]
    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")


def _describe_exit(returncode: int | None) -> str:
    if returncode is None:
        return "unknown status"
    if returncode >= 0:
        return f"exit status: {returncode}"
    try:
        name = signal.Signals(-returncode).name
    except ValueError:
        return f"signal: {-returncode}"
    return f"signal: {-returncode} ({name})"


def _build_plots(args: argparse.Namespace, targets: Iterable[str]) -> list[PlotData]:
    plots = []
    for target, color in zip(targets, Colors(args.color)):
        if args.cmd:
            display = target
        else:
            display = f"{target} ({get_host_ipaddr(target, args.ipv4, args.ipv6)})"
        plots.append(PlotData(display, args.buffer, color, args.simple_graphics))
    return plots


def _ping_options(args: argparse.Namespace, target: str) -> PingOptions:
    interval = _interval(args.watch_interval, _DEFAULT_PING_INTERVAL)
    if args.ipv4:
        options = PingOptions.new_ipv4(target, interval, args.interface)
    elif args.ipv6:
        options = PingOptions.new_ipv6(target, interval, args.interface)
    else:
        options = PingOptions.new(target, interval, args.interface)
    if args.ping_args is not None:
        options = options.with_raw_arguments(args.ping_args)
    return options


def _start_keyboard_thread(
    term: blessed.Terminal, events: queue.Queue, kill_event: threading.Event
) -> threading.Thread:
    def work() -> None:
        while not kill_event.is_set():
            key = term.inkey(timeout=_KEY_POLL)
            if not key:
                continue
            if key == "q" or key == "\x03" or key.code == term.KEY_ESCAPE:
                events.put(Event(EventKind.TERMINATE))
                return

    thread = threading.Thread(target=work, name="keyboard", daemon=True)
    thread.start()
    return thread


def _draw(term: blessed.Terminal, app: App, args: argparse.Namespace) -> None:
    lines = app.render(term.width, term.height, args.vertical_margin, args.horizontal_margin)
    screen = "".join(term.move_xy(0, row) + line for row, line in enumerate(lines))
    sys.stdout.write(screen)
    sys.stdout.flush()


def _run_loop(
    term: blessed.Terminal, app: App, args: argparse.Namespace, events: queue.Queue
) -> str | None:
    """Handle events until told to stop; return an error message to print, if any."""
    while True:
        try:
            event = events.get()
        except KeyboardInterrupt:
            return None
        if event.kind is EventKind.TERMINATE:
            return None
        if event.kind is EventKind.RENDER:
            _draw(term, app, args)
            continue
        update = event.update
        if update.kind is UpdateKind.RESULT:
            app.update(event.host_id, update.duration)
        elif update.kind is UpdateKind.TIMEOUT:
            app.update(event.host_id, None)
        elif update.kind is UpdateKind.TERMINATED:
            if update.returncode == 0:
                return None
            return (
                f"There was an error running ping: {_describe_exit(update.returncode)}\n"
                f"Stderr: {update.stderr}\n"
            )


def main(argv: Sequence[str] | None = None) -> int:
    """Run gping; returns the process exit status."""
    manpage = os.environ.get("GENERATE_MANPAGE")
    if manpage:
        generate_man_page(manpage)
        return 0

    args = parse_args(argv)
    if not args.hosts_or_commands:
        print(
            "Error: At least one host or command must be given (i.e gping google.com). "
            "Use --help for a full list of arguments.",
            file=sys.stderr,
        )
        return 1

    targets = [try_host_from_cloud_region(s) or s for s in args.hosts_or_commands]
    events: queue.Queue = queue.Queue()
    killed = threading.Event()
    workers: list[_Worker] = []

    try:
        plots = _build_plots(args, targets)
        for host_id, target in enumerate(targets):
            if args.cmd:
                workers.append(
                    start_cmd_thread(target, host_id, args.watch_interval, events, killed)
                )
            else:
                workers.append(
                    start_ping_thread(_ping_options(args, target), host_id, events, killed)
                )
    except (PingCreationError, ValueError, OSError) as exc:
        killed.set()
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    workers.append(start_render_thread(killed, events))

    app = App(plots, args.buffer)
    term = blessed.Terminal()
    with contextlib.ExitStack() as stack:
        stack.enter_context(term.cbreak())
        if args.clear:
            stack.enter_context(term.fullscreen())
        sys.stdout.write(term.clear)
        sys.stdout.flush()
        _start_keyboard_thread(term, events, killed)
        message = _run_loop(term, app, args, events)
        killed.set()
        sys.stdout.write(term.move_xy(0, max(0, term.height - 1)) + term.normal + "\n")
        sys.stdout.flush()

    if message:
        print(message, file=sys.stderr)
    for worker in workers:
        worker.join()
    for worker in workers:
        if worker.error is not None:
            print(f"Error: {worker.error}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())