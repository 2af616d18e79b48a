"""
Coordinator
===========

Wires one Producer and one Consumer to a fresh SharedChannel, runs them
in two threads, and waits for both.

Error policy:
- A producer failure stops the consumer (it would otherwise wait for a
  total that is never published).
- The first error raised by either thread is re-raised from ``run()``
  once both threads have been joined.
"""

import logging
import threading
import time
from typing import List, Optional

from .channel import SharedChannel
from .consumer import DEFAULT_IDLE_WAIT, Consumer, ProcessFn
from .models import RunReport
from .producer import ItemSource, Producer

logger = logging.getLogger(__name__)


class Coordinator:
    """Run a single producer/consumer exchange to completion.

    Args:
        items: Items for the producer (defaults to the reference batch).
        process: Per-item processing step for the consumer.
        produce_delay: Seconds the producer pauses after each push.
        idle_wait: Maximum seconds the consumer waits after an empty drain.
    """

    def __init__(
        self,
        items: Optional[ItemSource] = None,
        process: Optional[ProcessFn] = None,
        produce_delay: float = 0.0,
        idle_wait: float = DEFAULT_IDLE_WAIT,
    ):
        self.channel = SharedChannel()
        self.producer = Producer(self.channel, items=items, delay=produce_delay)
        self.consumer = Consumer(self.channel, process=process, idle_wait=idle_wait)
        self._errors: List[BaseException] = []
        self._errors_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> RunReport:
        """Start both threads, join them, and report the outcome.

        Raises:
            The first exception raised by the producer or the consumer.
        """
        start = time.time()

        producer_thread = threading.Thread(
            target=self._run_producer, name="assignflow-producer", daemon=True
        )
        consumer_thread = threading.Thread(
            target=self._run_consumer, name="assignflow-consumer", daemon=True
        )
        producer_thread.start()
        consumer_thread.start()

        try:
            producer_thread.join()
            consumer_thread.join()
        except KeyboardInterrupt:
            # Ctrl-C while joined: cancel and let both threads unwind.
            self.cancel()
            producer_thread.join()
            consumer_thread.join()

        if self._errors:
            raise self._errors[0]

        report = RunReport(
            status="cancelled" if self.producer.stopped_early else "completed",
            produced=self.producer.produced,
            consumed=self.consumer.consumed,
            failed=self.consumer.failed,
            duration=time.time() - start,
        )
        logger.info(
            "All %d assignments produced and consumed (%d failed, %.2fs)",
            report.consumed, report.failed, report.duration,
        )
        return report

    def cancel(self) -> None:
        """Stop production early; the consumer drains what was pushed."""
        logger.info("Cancelling production")
        self.producer.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_producer(self) -> None:
        try:
            self.producer.run()
        except Exception as e:
            logger.error("Producer failed: %s", e)
            self._record(e)
            self.consumer.stop()

    def _run_consumer(self) -> None:
        try:
            self.consumer.run()
        except Exception as e:
            logger.error("Consumer failed: %s", e)
            self._record(e)
            self.producer.cancel()

    def _record(self, error: BaseException) -> None:
        with self._errors_lock:
            self._errors.append(error)
