"""Decides what happens after a failed broker call."""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Optional, Union

from rabbitmq_job_queue.errors import BrokerConnectionError


class ErrorPolicyMode(enum.Enum):
    THROTTLE = "throttle"
    FAIL_FAST = "fail_fast"


class ConnectionErrorPolicy:
    """Logs broker failures, then either pauses the caller or raises.

    The pause is a fixed flood-control interval, not a backoff: it does not grow
    with repeated failures.
    """

    def __init__(
        self,
        sleep_on_error: Union[float, bool] = 5,
        *,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if sleep_on_error is False:
            self.mode = ErrorPolicyMode.FAIL_FAST
            self.sleep_seconds = 0.0
        else:
            self.mode = ErrorPolicyMode.THROTTLE
            self.sleep_seconds = float(sleep_on_error)
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def report(self, action: str, error: BaseException) -> None:
        self.logger.error("AMQP error while attempting %s: %s", action, error)

        if self.mode is ErrorPolicyMode.FAIL_FAST:
            raise BrokerConnectionError(
                "Error writing data to the connection with RabbitMQ"
            ) from error

        if self.sleep_seconds > 0:
            self._sleep(self.sleep_seconds)
