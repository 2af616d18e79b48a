"""
Consumer
========

Drains the SharedChannel in priority order until production is done and
every published item has been consumed.

The total count is only consulted once the done flag has been observed;
before that it is unknown and the loop keeps draining.
"""

import logging
import math
import threading
from typing import Callable, Optional

from .channel import SharedChannel
from .errors import ProtocolError
from .models import PriorityItem

logger = logging.getLogger(__name__)

# Upper bound (seconds) on one idle wait between empty drains
DEFAULT_IDLE_WAIT = 1.0

ProcessFn = Callable[[PriorityItem], None]


def log_item(item: PriorityItem) -> None:
    """Default processing step: log the consumed item."""
    logger.info("Consumed: %s", item)


class Consumer:
    """Consumes items from a SharedChannel.

    Args:
        channel: The channel shared with the producer.
        process: Called once per item, in priority order. Exceptions it
            raises are logged and the item is skipped.
        idle_wait: Maximum seconds to wait after an empty drain.
    """

    def __init__(
        self,
        channel: SharedChannel,
        process: Optional[ProcessFn] = None,
        idle_wait: float = DEFAULT_IDLE_WAIT,
    ):
        if channel is None:
            raise ValueError("Unable to consume items from a missing channel")
        if not math.isfinite(idle_wait) or idle_wait <= 0:
            raise ValueError(f"idle_wait must be finite and > 0, got {idle_wait}")
        self.channel = channel
        self.process = process or log_item
        self.idle_wait = idle_wait
        self.consumed = 0
        self.failed = 0
        self._stop = threading.Event()

    def run(self) -> int:
        """Consume until every produced item is processed, or stopped.

        Returns:
            Number of items consumed.
        """
        while True:
            done, total = self.channel.snapshot()
            if done and self.consumed >= total:
                break
            if self._stop.is_set():
                logger.info("Consumer stopped after %d item(s)", self.consumed)
                break

            batch = self.channel.drain_all()
            if not batch:
                if done:
                    # Every item is pushed before done is published.
                    raise ProtocolError(
                        f"Production done with {total} item(s) but queue is "
                        f"empty after {self.consumed} consumed"
                    )
                self.channel.wait_for_items(self.idle_wait)
                continue

            for item in batch:
                self._process_one(item)

        return self.consumed

    def stop(self) -> None:
        """Ask the loop to exit at its next check. Consumed state is kept."""
        self._stop.set()
        self.channel.wake()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _process_one(self, item: PriorityItem) -> None:
        self.consumed += 1
        try:
            self.process(item)
        except Exception:
            self.failed += 1
            logger.exception("Failed to process %s; skipping", item)
