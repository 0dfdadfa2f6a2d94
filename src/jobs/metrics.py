"""Counters for a scraping run."""
import time
import logging
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class Metrics:
    """Per-channel counters and run duration."""

    def __init__(self, channels: list[str]):
        self.channels = channels
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    def record_channel(self, channel: str, games: int) -> None:
        self.increment("channels_ok")
        self.increment("games", games)
        self.increment(f"games_{channel}", games)

    def record_failure(self, channel: str) -> None:
        self.increment("channels_failed")
        self.increment(f"failed_{channel}")

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def report(self) -> None:
        """Log current metrics."""
        per_channel = " | ".join(
            f"{channel}: {self.counters.get(f'games_{channel}', 0)}" for channel in self.channels
        )
        logger.info(
            f"[RUNNER] Channels OK: {self.counters.get('channels_ok', 0)}/{len(self.channels)} | "
            f"Games: {self.counters.get('games', 0)} ({per_channel}) | "
            f"Retries: {self.counters.get('retries', 0)} | "
            f"Elapsed: {self.elapsed():.1f}s"
        )

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "channels": len(self.channels),
            "channels_ok": self.counters.get("channels_ok", 0),
            "channels_failed": self.counters.get("channels_failed", 0),
            "games": self.counters.get("games", 0),
            "retries": self.counters.get("retries", 0),
            "elapsed_seconds": round(self.elapsed(), 3),
        }
