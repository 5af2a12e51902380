# gping

Ping, but with a graph.

`gping` pings one or more hosts at once and draws their round-trip times
as a chart in the terminal, next to a histogram of recent latencies and a
header row for each target with last, min, max, average, jitter, 95th
percentile and timeout count.

It can also time commands instead of pinging hosts.

## Installation

```
pip install .
```

The system `ping` command must be installed. On Linux, iputils ping and
BusyBox ping are supported; inetutils ping is refused with an error. BSD
and macOS ping are supported too.

## Usage

Ping a single host:

```
gping example.com
```

Ping several hosts at once:

```
gping example.com example.org 192.0.2.1
```

Cloud region shorthands are expanded to an endpoint in that region
(`aws:<region>`, `gcp:<region>`, and `gcp:` on its own):

```
gping aws:eu-west-1 gcp:me-central2 gcp:
```

Time commands rather than hosts. Each command is split on whitespace and
run directly, not through a shell; a run that exits non-zero counts as a
timeout:

```
gping --cmd "sleep 0.1" "true"
```

Press `q`, `Esc` or `Ctrl-C` to quit.

### Options

| Option | Meaning |
| --- | --- |
| `--cmd` | Graph how long each given command takes to run, not ping times |
| `-n`, `--watch-interval SECONDS` | Time between samples; defaults to 0.2 for ping, 0.5 for `--cmd` |
| `-b`, `--buffer SECONDS` | Seconds of history shown in the graph (default 30) |
| `-4` / `-6` | Resolve targets to an IPv4 or an IPv6 address |
| `-i`, `--interface NAME` | Network interface to ping from |
| `-s`, `--simple-graphics` | Draw with dots instead of braille characters |
| `--vertical-margin N` | Margin above and below the graph (default 1) |
| `--horizontal-margin N` | Margin left and right of the graph (default 0) |
| `-c`, `--color LIST` | Comma separated colours, one for each target in order; may be repeated |
| `--clear` | Draw on the alternate screen, so the graph is gone on exit |
| `--ping-args ARGS...` | Every argument after this flag is passed straight to `ping` (not with `--cmd`) |
| `-V`, `--version` | Print the version and exit |

Colours can be `#RRGGBB` hex codes, palette indices from 0 to 255, or one
of `black`, `red`, `green`, `yellow`, `blue`, `magenta`, `cyan`, `gray`,
`dark-gray`, `light-red`, `light-green`, `light-yellow`, `light-blue`,
`light-magenta`, `light-cyan` and `white`. Targets with no colour given are
assigned an unused palette index. An invalid colour is an error.

Set `GENERATE_MANPAGE` to a file path to write a roff manual page there in
place of running.

## Using the pinger as a library

The `gping.pinger` package runs the system `ping` and turns its output
into results (`Pong`, `Timeout`, `Unknown`, and a final `PingExited`):

```python
from gping.pinger.core import PingOptions, Pong, Timeout
from gping.pinger.dispatch import ping

options = PingOptions.new("example.com", 0.5, None)
for result in ping(options):
    if isinstance(result, Pong):
        print(result)  # round trip, e.g. "12.345ms"
    elif isinstance(result, Timeout):
        print("Timeout")
```

`get_pinger` picks `BSDPinger`, `MacOSPinger` or `LinuxPinger` for the
running platform; `LinuxPinger` runs `ping -V` to tell iputils from
BusyBox. Each pinger's `parse` method turns one line of output into a
result, and `ping_args` gives the command line it runs. Failures to start
raise a subclass of `PingCreationError`.

Setting the environment variable `PINGER_FAKE_PING=1` selects
`FakePinger`, which yields random replies of 50 to 149 ms without touching
the network.

## What it does not do

- Pinging on Windows is not supported: `get_pinger` raises
  `NotSupportedError` there. `--cmd` mode does not need ping.
- The screen is drawn as plain text in the terminal's own colour. Colours
  given with `--color` are checked and attached to each target, but not
  used when drawing.