"""
Producer
========

Builds a batch of items (in no particular order), pushes each into the
SharedChannel, then publishes the batch size as the production total.

If the batch cannot be built the run aborts *without* marking production
done and the error propagates to the caller.
"""

import logging
import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Union

from .channel import SharedChannel
from .errors import ProductionError
from .models import Priority, PriorityItem

logger = logging.getLogger(__name__)

ItemSource = Union[Sequence[PriorityItem], Callable[[], Sequence[PriorityItem]]]


def days_from_now(days: float, now: Optional[datetime] = None) -> datetime:
    """Return a UTC timestamp ``days`` days after ``now`` (default: current time)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now + timedelta(days=days)


def default_batch(now: Optional[datetime] = None) -> List[PriorityItem]:
    """The reference batch of six assignments.

    Insertion order deliberately ignores due date and priority.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return [
        PriorityItem(description="Buy milk and eggs",
                     due=days_from_now(2, now), priority=Priority.MEDIUM),
        PriorityItem(description="Find new show on Netflix",
                     due=days_from_now(6, now), priority=Priority.LOW),
        PriorityItem(description="Continue Udemy course",
                     due=days_from_now(5, now), priority=Priority.MEDIUM),
        PriorityItem(description="Finish work assignment #1",
                     due=days_from_now(4, now), priority=Priority.HIGH),
        PriorityItem(description="Finish work assignment #2",
                     due=days_from_now(2, now), priority=Priority.HIGH),
        PriorityItem(description="Check out new restaurant",
                     due=days_from_now(13, now), priority=Priority.LOW),
    ]


class Producer:
    """Pushes a batch of items into a SharedChannel.

    Args:
        channel: The channel shared with the consumer.
        items: Items to produce, or a zero-argument callable returning them.
            Defaults to ``default_batch()``.
        delay: Seconds to pause after each push (simulated work).
    """

    def __init__(
        self,
        channel: SharedChannel,
        items: Optional[ItemSource] = None,
        delay: float = 0.0,
    ):
        if channel is None:
            raise ValueError("Unable to produce items into a missing channel")
        if not math.isfinite(delay) or delay < 0:
            raise ValueError(f"delay must be finite and >= 0, got {delay}")
        self.channel = channel
        self.items = items
        self.delay = delay
        self.produced = 0
        self.batch_size = 0
        self._cancel = threading.Event()

    def generate_batch(self) -> List[PriorityItem]:
        """Build the batch to push. Order carries no meaning.

        Raises:
            ProductionError: If the item source fails or yields non-items.
        """
        if self.items is None:
            return default_batch()

        try:
            batch = list(self.items() if callable(self.items) else self.items)
        except ProductionError:
            raise
        except Exception as e:
            raise ProductionError(f"Failed to generate batch: {e}") from e

        for i, item in enumerate(batch):
            if not isinstance(item, PriorityItem):
                raise ProductionError(
                    f"Batch entry {i} is {type(item).__name__}, not PriorityItem"
                )
        return batch

    def run(self) -> int:
        """Push the whole batch, then publish the production total.

        Returns:
            Number of items pushed (and published as the total).
        """
        batch = self.generate_batch()
        self.batch_size = len(batch)
        logger.info("Producing %d item(s)", len(batch))

        for item in batch:
            if self._cancel.is_set():
                break
            logger.info("Producing: %s", item)
            self.channel.push(item)
            self.produced += 1
            if self.delay and self._cancel.wait(self.delay):
                break

        if self.produced < len(batch):
            logger.warning(
                "Production cancelled: %d of %d item(s) pushed",
                self.produced, len(batch),
            )

        self.channel.mark_production_done(self.produced)
        return self.produced

    def cancel(self) -> None:
        """Stop pushing; the items already pushed become the published total."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def stopped_early(self) -> bool:
        """Whether cancellation left part of the batch unpushed."""
        return self.produced < self.batch_size
