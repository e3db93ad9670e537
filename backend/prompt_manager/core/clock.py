"""Wall-clock helpers. Timestamps are Unix epoch milliseconds."""

import time
from typing import Callable

# Injectable time source: services take one so tests can pin "now".
Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)
