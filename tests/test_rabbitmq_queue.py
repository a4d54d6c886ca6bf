"""Tests for the RabbitMQQueue facade."""

import json
from datetime import timedelta
from unittest.mock import Mock, patch

import pika
import pytest

from rabbitmq_job_queue import (
    BrokerConnectionError,
    ConfigurationError,
    RabbitMQJob,
    RabbitMQQueue,
    RabbitMQQueueConfig,
    RabbitMQQueueDependencies,
)
from rabbitmq_job_queue.contracts import IBrokerContext, IConsumer, IProducer, IRabbitMQConnection
from rabbitmq_job_queue.error_policy import ConnectionErrorPolicy
from rabbitmq_job_queue.models import DeliveredMessage
from rabbitmq_job_queue.payload import JSONPayloadFactory

CONFIG = {
    "options": {
        "queue": {"name": "default", "arguments": '{"x-max-priority": 10}'},
        "exchange": {"name": "", "type": "direct"},
    },
    "sleep_on_error": 0,
}


@pytest.fixture
def producer():
    producer = Mock(spec=IProducer)
    producer.delivery_delay = None
    return producer


@pytest.fixture
def context(producer):
    broker = Mock(spec=IBrokerContext)
    broker.ensure_connected.return_value = 1
    broker.create_producer.return_value = producer
    broker.declare_queue.return_value = 0
    return broker


def make_queue(context, config=None, *, sleep_on_error=0, logger=None):
    config = RabbitMQQueueConfig.from_mapping(config or CONFIG)
    return RabbitMQQueue(
        context=context,
        config=config,
        payload_factory=JSONPayloadFactory(),
        error_policy=ConnectionErrorPolicy(sleep_on_error, logger=logger or Mock(), sleep=Mock()),
    )


def sent(producer):
    return producer.send.call_args.args


def test_push_declares_topology_once(context):
    queue = make_queue(context)

    queue.push("send_email", {"to": "a@example.com"})
    queue.push("send_email", {"to": "b@example.com"})

    context.declare_exchange.assert_called_once()
    context.declare_queue.assert_called_once()
    assert context.bind.call_count == 2


def test_push_encodes_payload_and_routes_to_queue(context, producer):
    queue = make_queue(context)

    correlation_id = queue.push("send_email", {"to": "a@example.com"}, "emails")

    exchange, envelope = sent(producer)
    assert exchange.name == "emails"
    assert envelope.routing_key == "emails"
    assert envelope.correlation_id == correlation_id
    assert json.loads(envelope.body)["data"] == {"to": "a@example.com"}


def test_later_sets_delivery_delay_in_milliseconds(context, producer):
    make_queue(context).later(10, "send_email", {})

    assert producer.delivery_delay == 10000


def test_later_accepts_timedelta(context, producer):
    make_queue(context).later(timedelta(seconds=2.5), "send_email", {})

    assert producer.delivery_delay == 2500


def test_release_propagates_attempts(context, producer):
    make_queue(context).release(0, "send_email", {}, "emails", attempts=3)

    _, envelope = sent(producer)
    assert envelope.headers["attempts_count"] == 3


def test_correlation_id_is_stable_once_set(context, producer):
    queue = make_queue(context)
    queue.set_correlation_id("X")

    first = queue.push_raw(b"{}")
    first_envelope = sent(producer)[1]
    second = queue.push_raw(b"{}")
    second_envelope = sent(producer)[1]

    assert first == second == "X"
    assert first_envelope.correlation_id == second_envelope.correlation_id == "X"
    assert queue.get_correlation_id() == "X"


def test_correlation_id_is_unique_when_unset(context):
    queue = make_queue(context)

    assert queue.get_correlation_id() != queue.get_correlation_id()


def test_push_raw_throttles_on_declare_failure(context):
    context.declare_exchange.side_effect = pika.exceptions.AMQPConnectionError("down")
    logger = Mock()
    queue = make_queue(context, logger=logger)

    assert queue.push_raw(b"{}") is None

    logger.error.assert_called_once()
    assert logger.error.call_args.args[1] == "publish"


def test_push_raw_fail_fast_wraps_cause(context):
    error = pika.exceptions.AMQPConnectionError("down")
    context.declare_exchange.side_effect = error
    queue = make_queue(context, sleep_on_error=False)

    with pytest.raises(BrokerConnectionError) as excinfo:
        queue.push_raw(b"{}")

    assert excinfo.value.__cause__ is error


def test_default_error_policy_follows_config(context):
    config = dict(CONFIG, sleep_on_error=False)
    context.declare_exchange.side_effect = pika.exceptions.AMQPConnectionError("down")
    queue = RabbitMQQueue(
        context=context,
        config=RabbitMQQueueConfig.from_mapping(config),
        payload_factory=JSONPayloadFactory(),
    )

    with pytest.raises(BrokerConnectionError):
        queue.push_raw(b"{}")


def test_serialization_errors_propagate(context):
    queue = make_queue(context)

    with pytest.raises(ValueError):
        queue.push("send_email", {"bad": object()})

    context.declare_exchange.assert_not_called()


def test_size_declares_then_counts(context):
    context.declare_queue.return_value = 4
    queue = make_queue(context)

    assert queue.size("emails") == 4
    assert context.declare_queue.call_count == 2
    assert context.declare_queue.call_args.args[0].name == "emails"
    assert context.declare_queue.call_args.args[0].arguments == {"x-max-priority": 10}


def test_pop_returns_job_and_release_requeues(context, producer):
    broker_consumer = Mock(spec=IConsumer)
    broker_consumer.receive_no_wait.return_value = DeliveredMessage(
        method=Mock(delivery_tag=1),
        properties=pika.BasicProperties(correlation_id="cid", headers={"attempts_count": 1}),
        body=b'{"job": "send_email"}',
    )
    context.create_consumer.return_value = broker_consumer
    queue = make_queue(context)

    job = queue.pop("emails")
    job.release(5)

    assert isinstance(job, RabbitMQJob)
    assert job.attempts() == 2
    broker_consumer.acknowledge.assert_called_once()
    _, envelope = sent(producer)
    assert envelope.routing_key == "emails"
    assert envelope.headers["attempts_count"] == 2
    assert envelope.body == b'{"job": "send_email"}'
    assert producer.delivery_delay == 5000


def test_pop_empty_queue(context):
    context.create_consumer.return_value.receive_no_wait.return_value = None

    assert make_queue(context).pop() is None


def test_queues_do_not_share_topology_cache(context):
    make_queue(context).push_raw(b"{}")
    make_queue(context).push_raw(b"{}")

    assert context.declare_queue.call_count == 2


def test_from_config_uses_dependencies(context):
    connection = Mock(spec=IRabbitMQConnection)
    make_connection = Mock(return_value=connection)
    make_context = Mock(return_value=context)
    dependencies = RabbitMQQueueDependencies(
        make_connection=make_connection,
        make_context=make_context,
    )

    queue = RabbitMQQueue.from_config(CONFIG, "amqp://localhost", dependencies=dependencies)

    make_connection.assert_called_once_with("amqp://localhost")
    make_context.assert_called_once_with(connection)
    assert queue.context is context
    assert queue.config.queue_name == "default"
    assert queue.error_policy.sleep_seconds == 0.0


def test_from_config_uses_default_dependencies():
    with patch("rabbitmq_job_queue.queue.rabbitmq_queue_config.RabbitMQConnection") as mock_conn_class:
        queue = RabbitMQQueue.from_config(CONFIG, "amqp://localhost")

    mock_conn_class.assert_called_once_with("amqp://localhost")
    assert queue.context.connection is mock_conn_class.return_value


def test_from_config_rejects_bad_configuration():
    with pytest.raises(ConfigurationError):
        RabbitMQQueue.from_config({"options": {"queue": {"name": "default", "arguments": "{"}}})


def test_push_raw_unknown_property_raises_without_throttling(context, producer):
    logger = Mock()
    queue = make_queue(context, logger=logger)

    with pytest.raises(ValueError):
        queue.push_raw(b"{}", options={"properties": {"tenant": "acme"}})

    logger.error.assert_not_called()
    producer.send.assert_not_called()
