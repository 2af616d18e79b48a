"""
SharedChannel (Priority Queue + Completion State)
==================================================

The only state shared between the producer and the consumer thread:

- a min-heap of PriorityItem ordered by (due, priority)
- a write-once "production done" flag
- the total number of items produced, unknown (None) until the flag is set

The flag and the count are published together under the channel lock,
count first, so a reader that sees ``done`` always sees the real count.
"""

import heapq
import logging
import threading
from typing import List, Optional, Tuple

from .errors import ProtocolError
from .models import PriorityItem

logger = logging.getLogger(__name__)


class SharedChannel:
    """Thread-safe, unbounded priority queue with completion signalling.

    Items are drained in ascending (due, priority) order. Within the same
    key, FIFO ordering is maintained via a sequence counter.
    """

    def __init__(self) -> None:
        self._heap: List[tuple] = []  # (sort_key, seq, PriorityItem)
        self._seq: int = 0
        self._done: bool = False
        self._total: Optional[int] = None
        self._cond = threading.Condition(threading.Lock())

    def push(self, item: PriorityItem) -> None:
        """Add an item to the queue and wake a waiting consumer.

        Args:
            item: Item to enqueue.

        Raises:
            TypeError: If item is not a PriorityItem.
            ProtocolError: If production was already marked done.
        """
        if not isinstance(item, PriorityItem):
            raise TypeError(f"Expected PriorityItem, got {type(item).__name__}")

        with self._cond:
            if self._done:
                raise ProtocolError("Cannot push an item after production is done")
            heapq.heappush(self._heap, (item.sort_key, self._seq, item))
            self._seq += 1
            self._cond.notify_all()

    def drain_all(self) -> List[PriorityItem]:
        """Remove and return every queued item in priority order.

        Never blocks. Returns an empty list if the queue is empty.
        """
        with self._cond:
            heap, self._heap = self._heap, []
        return [heapq.heappop(heap)[2] for _ in range(len(heap))]

    def mark_production_done(self, total_count: int) -> None:
        """Publish the final item count, then the done flag.

        Args:
            total_count: Number of items the producer pushed.

        Raises:
            ValueError: If total_count is negative.
            ProtocolError: If production was already marked done.
        """
        if total_count < 0:
            raise ValueError(f"total_count must be >= 0, got {total_count}")

        with self._cond:
            if self._done:
                raise ProtocolError(
                    f"Production already marked done with {self._total} items"
                )
            self._total = total_count
            self._done = True
            self._cond.notify_all()
        logger.debug("Production done: %d item(s)", total_count)

    def is_production_done(self) -> bool:
        with self._cond:
            return self._done

    def get_total_count(self) -> int:
        """Return the published total.

        Raises:
            ProtocolError: If production is not done yet.
        """
        with self._cond:
            if not self._done:
                raise ProtocolError("Total count read before production is done")
            return self._total

    def snapshot(self) -> Tuple[bool, Optional[int]]:
        """Read the done flag and the total count as one unit."""
        with self._cond:
            return self._done, self._total

    def wait_for_items(self, timeout: Optional[float] = None) -> bool:
        """Block until an item is queued, production is done, or timeout.

        Also returns early when ``wake()`` is called.

        Returns:
            True if items are available when the wait ends.
        """
        with self._cond:
            if not self._heap and not self._done:
                self._cond.wait(timeout=timeout)
            return bool(self._heap)

    def wake(self) -> None:
        """Wake every thread blocked in ``wait_for_items``."""
        with self._cond:
            self._cond.notify_all()

    @property
    def size(self) -> int:
        """Number of items in the queue."""
        with self._cond:
            return len(self._heap)

    @property
    def empty(self) -> bool:
        """Whether the queue is empty."""
        with self._cond:
            return len(self._heap) == 0

    def __len__(self) -> int:
        return self.size
