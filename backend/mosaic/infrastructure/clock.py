"""Wall Clock — block height and timestamp for event records from system time.

Invariants:
    - timestamp() is whole Unix seconds
    - block_height() never goes below 0 and never decreases while time moves forward
"""

import time


class WallClock:
    """Derives block height as elapsed block intervals since genesis."""

    def __init__(self, genesis_timestamp: int = 0, block_interval_seconds: int = 600):
        if block_interval_seconds <= 0:
            raise ValueError("block_interval_seconds must be positive")
        self._genesis = genesis_timestamp
        self._interval = block_interval_seconds

    def timestamp(self) -> int:
        return int(time.time())

    def block_height(self) -> int:
        return max(0, (self.timestamp() - self._genesis) // self._interval)
