"""A pinger that makes up replies, for trying the interface without a network."""

from __future__ import annotations

import random
import re
import time
from typing import Iterator

from gping.pinger.core import Pinger, PingResult, Pong, extract_regex

_FAKE_LINE_RE = re.compile(r"Fake ping line: (?P<ms>\d+) ms")


class FakePinger(Pinger):
    """Yields replies of 50 to 149 ms, one per interval."""

    def parse(self, line: str) -> PingResult | None:
        """Parse a line this pinger produced."""
        return extract_regex(_FAKE_LINE_RE, line)

    def ping_args(self) -> tuple[str, list[str]]:
        raise TypeError("FakePinger does not run an external ping command")

    def start(self) -> Iterator[PingResult]:
        return self._generate()

    def _generate(self) -> Iterator[PingResult]:
        rng = random.Random()
        while True:
            millis = rng.randrange(50, 150)
            yield Pong(millis / 1000, f"Fake ping line: {millis} ms")
            time.sleep(self.options.interval)