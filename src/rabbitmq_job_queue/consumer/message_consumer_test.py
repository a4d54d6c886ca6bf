"""Tests for MessageConsumer."""

from unittest.mock import Mock

import pika
import pytest

from rabbitmq_job_queue.consumer import MessageConsumer
from rabbitmq_job_queue.contracts import IBrokerContext, IConsumer
from rabbitmq_job_queue.error_policy import ConnectionErrorPolicy
from rabbitmq_job_queue.errors import BrokerConnectionError
from rabbitmq_job_queue.jobs import RabbitMQJob
from rabbitmq_job_queue.models import DeliveredMessage
from rabbitmq_job_queue.queue_config import ExchangeConfig, QueueConfig
from rabbitmq_job_queue.topology import TopologyManager


@pytest.fixture
def broker_consumer():
    return Mock(spec=IConsumer)


@pytest.fixture
def context(broker_consumer):
    broker = Mock(spec=IBrokerContext)
    broker.ensure_connected.return_value = 1
    broker.create_consumer.return_value = broker_consumer
    return broker


def make_consumer(context, *, sleep_on_error=0, sleep=None):
    return MessageConsumer(
        context=context,
        topology=TopologyManager(
            context=context,
            queue_config=QueueConfig(name="default"),
            exchange_config=ExchangeConfig(),
        ),
        error_policy=ConnectionErrorPolicy(sleep_on_error, logger=Mock(), sleep=sleep or Mock()),
    )


def test_dequeue_wraps_message_in_job(context, broker_consumer):
    message = DeliveredMessage(method=Mock(delivery_tag=1), properties=pika.BasicProperties(), body=b"{}")
    broker_consumer.receive_no_wait.return_value = message

    job = make_consumer(context).dequeue("emails")

    assert isinstance(job, RabbitMQJob)
    assert job.message is message
    assert job.consumer is broker_consumer
    assert job.get_queue() == "emails"
    context.create_consumer.assert_called_once()
    assert context.create_consumer.call_args.args[0].name == "emails"


def test_dequeue_empty_queue_returns_none(context, broker_consumer):
    broker_consumer.receive_no_wait.return_value = None
    sleep = Mock()

    assert make_consumer(context, sleep_on_error=5, sleep=sleep).dequeue() is None

    sleep.assert_not_called()


def test_dequeue_failure_is_throttled(context, broker_consumer):
    broker_consumer.receive_no_wait.side_effect = pika.exceptions.AMQPChannelError("closed")
    sleep = Mock()

    assert make_consumer(context, sleep_on_error=5, sleep=sleep).dequeue() is None

    sleep.assert_called_once_with(5.0)


def test_dequeue_failure_in_fail_fast_mode_raises(context):
    context.declare_queue.side_effect = pika.exceptions.AMQPConnectionError("down")

    with pytest.raises(BrokerConnectionError):
        make_consumer(context, sleep_on_error=False).dequeue()
