"""
Snowflake id generator

Ids are 64-bit integers rendered as strings:
    | 42 bits ms since EPOCH | 10 bits worker | 12 bits sequence |
so they sort by creation time.
"""
import os
import threading
import time

EPOCH = 1609459200000  # 2021-01-01T00:00:00Z in ms

WORKER_BITS = 10
SEQUENCE_BITS = 12
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1


class SnowflakeGenerator:
    def __init__(self, worker_id: int = 0):
        if not 0 <= worker_id < (1 << WORKER_BITS):
            raise ValueError(f"worker_id out of range: {worker_id}")
        self.worker_id = worker_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def next_id(self) -> int:
        with self._lock:
            now = self._now_ms()
            # clock moved backwards: keep issuing from the last timestamp
            if now < self._last_ms:
                now = self._last_ms

            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & MAX_SEQUENCE
                if self._sequence == 0:
                    while now <= self._last_ms:
                        now = self._now_ms()
            else:
                self._sequence = 0

            self._last_ms = now
            return (
                ((now - EPOCH) << (WORKER_BITS + SEQUENCE_BITS))
                | (self.worker_id << SEQUENCE_BITS)
                | self._sequence
            )


_generator = SnowflakeGenerator(int(os.getenv("WORKER_ID", "0")))


def generate_id() -> str:
    return str(_generator.next_id())
