"""Timeout-bound channel delivery.

Runs channel sends on a thread pool so that a slow or hung provider is
reported as a failed delivery instead of blocking the caller.

Usage Example:
    executor = DeliveryExecutor(
        channels={"email": DryRunChannel("email"), "inApp": InAppChannel(store)},
        timeout_seconds=10,
    )
    results = executor.deliver_all(messages)
    failed = [r for r in results if not r.is_success]
"""

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import ChannelMessage
from infrastructure.operations import OperationResult

logger = get_module_logger()


class DeliveryExecutor:
    """Deliver channel messages with per-attempt timeouts.

    Messages are submitted in batches no larger than the pool, so every
    attempt gets the full timeout measured from when it starts running.

    Attributes:
        channels: Dict mapping channel name to NotificationChannel instance
        timeout_seconds: Upper bound for a single send
    """

    def __init__(
        self,
        channels: Dict[str, NotificationChannel],
        timeout_seconds: float = 10.0,
        max_workers: int = 8,
    ):
        self.channels = channels
        self.timeout_seconds = timeout_seconds
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="channel-delivery"
        )
        logger.info(
            "initialized_delivery_executor",
            channels=list(channels.keys()),
            timeout_seconds=timeout_seconds,
            max_workers=max_workers,
        )

    def get_available_channels(self) -> List[str]:
        return list(self.channels.keys())

    def deliver_all(self, messages: List[ChannelMessage]) -> List[OperationResult]:
        """Deliver messages, returning one result per message in order.

        Never raises for channel problems: unknown channels, exceptions and
        timeouts all come back as error results.
        """
        results: List[Optional[OperationResult]] = [None] * len(messages)
        for start in range(0, len(messages), self._max_workers):
            batch = list(enumerate(messages))[start : start + self._max_workers]
            self._deliver_batch(batch, results)
        return [r for r in results if r is not None]

    def deliver(self, message: ChannelMessage) -> OperationResult:
        return self.deliver_all([message])[0]

    def _deliver_batch(self, batch, results: List[Optional[OperationResult]]) -> None:
        pending = []
        for index, message in batch:
            channel = self.channels.get(message.channel)
            if channel is None:
                logger.warning(
                    "channel_not_configured",
                    channel=message.channel,
                    record_id=message.record_id,
                    available_channels=list(self.channels.keys()),
                )
                results[index] = OperationResult.permanent_error(
                    f"Channel '{message.channel}' is not configured",
                    error_code="CHANNEL_NOT_CONFIGURED",
                )
                continue
            pending.append((index, message, self._executor.submit(channel.send, message)))

        deadline = time.monotonic() + self.timeout_seconds
        for index, message, future in pending:
            try:
                result = future.result(timeout=max(0.0, deadline - time.monotonic()))
            except FutureTimeoutError:
                future.cancel()
                logger.warning(
                    "channel_delivery_timed_out",
                    channel=message.channel,
                    record_id=message.record_id,
                    timeout_seconds=self.timeout_seconds,
                )
                results[index] = OperationResult.transient_error(
                    f"Channel '{message.channel}' timed out after {self.timeout_seconds}s",
                    error_code="CHANNEL_TIMEOUT",
                )
                continue
            except Exception as e:
                logger.error(
                    "channel_exception",
                    channel=message.channel,
                    record_id=message.record_id,
                    error=str(e),
                    exc_info=True,
                )
                results[index] = OperationResult.permanent_error(
                    f"Channel exception: {e}", error_code="CHANNEL_EXCEPTION"
                )
                continue

            if not isinstance(result, OperationResult):
                result = OperationResult.permanent_error(
                    f"Channel '{message.channel}' returned no result",
                    error_code="INVALID_CHANNEL_RESULT",
                )
            results[index] = result

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
