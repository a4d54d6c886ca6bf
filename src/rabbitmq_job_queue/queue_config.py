"""Provides exchange and queue configuration for the RabbitMQ job queue."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError

DEFAULT_SLEEP_ON_ERROR = 5


def parse_arguments(raw: Any, *, owner: str) -> Dict[str, Any]:
    """Decode broker ``arguments`` given as JSON text or as a mapping."""
    if raw is None or raw == "":
        return {}

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{owner}.arguments is not valid JSON: {exc}") from exc

    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"{owner}.arguments must decode to a mapping, got {type(raw).__name__}."
        )

    return dict(raw)


def parse_flag(options: Mapping[str, Any], key: str, default: bool, *, owner: str) -> bool:
    value = options.get(key, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f"{owner}.{key} must be a boolean, got {value!r}.")
    return value


@dataclass(frozen=True)
class ExchangeConfig:
    """Exchange declaration options.

    An empty ``name`` means the exchange is named after the queue being resolved.
    """

    name: str = ""
    type: str = "direct"
    arguments: Mapping[str, Any] = field(default_factory=dict)
    passive: bool = False
    durable: bool = True
    auto_delete: bool = False
    declare: bool = True

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> ExchangeConfig:
        return cls(
            name=options.get("name") or "",
            type=options.get("type") or "direct",
            arguments=parse_arguments(options.get("arguments"), owner="exchange"),
            passive=parse_flag(options, "passive", False, owner="exchange"),
            durable=parse_flag(options, "durable", True, owner="exchange"),
            auto_delete=parse_flag(options, "auto_delete", False, owner="exchange"),
            declare=parse_flag(options, "declare", True, owner="exchange"),
        )


@dataclass(frozen=True)
class QueueConfig:
    """Queue declaration options.

    ``bind`` binds the queue to the exchange using the queue name as routing key.
    """

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    passive: bool = False
    durable: bool = True
    exclusive: bool = False
    auto_delete: bool = False
    declare: bool = True
    bind: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("A default queue name must be configured.")

    @classmethod
    def from_mapping(
        cls, options: Mapping[str, Any], *, name: Optional[str] = None
    ) -> QueueConfig:
        return cls(
            name=name or options.get("name") or "",
            arguments=parse_arguments(options.get("arguments"), owner="queue"),
            passive=parse_flag(options, "passive", False, owner="queue"),
            durable=parse_flag(options, "durable", True, owner="queue"),
            exclusive=parse_flag(options, "exclusive", False, owner="queue"),
            auto_delete=parse_flag(options, "auto_delete", False, owner="queue"),
            declare=parse_flag(options, "declare", True, owner="queue"),
            bind=parse_flag(options, "bind", True, owner="queue"),
        )


@dataclass(frozen=True)
class RabbitMQQueueConfig:
    """Complete configuration of a `RabbitMQQueue`.

    ``sleep_on_error`` is the number of seconds to pause after a broker failure.
    Setting it to ``False`` makes broker failures fatal instead.
    """

    queue: QueueConfig
    exchange: ExchangeConfig = field(default_factory=ExchangeConfig)
    sleep_on_error: Union[float, bool] = DEFAULT_SLEEP_ON_ERROR

    def __post_init__(self) -> None:
        if self.sleep_on_error is False:
            return
        if self.sleep_on_error is True or not isinstance(self.sleep_on_error, (int, float)):
            raise ConfigurationError(
                f"sleep_on_error must be a number of seconds or False, got {self.sleep_on_error!r}."
            )
        if self.sleep_on_error < 0:
            raise ConfigurationError("sleep_on_error must not be negative.")

    @property
    def queue_name(self) -> str:
        return self.queue.name

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> RabbitMQQueueConfig:
        """Build a configuration from the nested ``options`` layout.

        ``config["queue"]`` overrides ``config["options"]["queue"]["name"]``.
        """
        options = config.get("options") or {}
        sleep_on_error = config.get("sleep_on_error", DEFAULT_SLEEP_ON_ERROR)
        if sleep_on_error is None:
            sleep_on_error = DEFAULT_SLEEP_ON_ERROR

        return cls(
            queue=QueueConfig.from_mapping(options.get("queue") or {}, name=config.get("queue")),
            exchange=ExchangeConfig.from_mapping(options.get("exchange") or {}),
            sleep_on_error=sleep_on_error,
        )
