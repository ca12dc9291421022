import queue
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from event_datagen.config import (
    DatagenConfig,
    EventTiming,
    OnlineOrderConfig,
    ProductReviewConfig,
    ReturnRequestConfig,
    TopicNames,
    WorkloadConfig,
)
from event_datagen.worker import EventEmitter, build_size_issue_catalog, generator_worker


class RecordingProducer:
    """Collects sent events instead of talking to Kafka"""

    def __init__(self):
        self.sent = []

    def send(self, topic, value, key=None, headers=None):
        self.sent.append((topic, value, key))

    def topics(self):
        return [topic for topic, _, _ in self.sent]


@pytest.fixture
def producer():
    return RecordingProducer()


@pytest.fixture
def catalog(size_issue_product):
    return (size_issue_product,)


@pytest.fixture
def now():
    return datetime(2024, 6, 15, 14, 30, 0, tzinfo=timezone.utc)


def test_order_chains_out_of_stock_notice(producer, catalog, faker, rng, now):
    config = DatagenConfig(online_orders=OnlineOrderConfig(out_of_stock_ratio=1.0))
    topics = TopicNames()
    emitter = EventEmitter(producer, topics, config, catalog, faker, rng)

    emitter.emit_online_order(now)

    assert producer.topics() == [topics.online_orders, topics.out_of_stocks]
    order = producer.sent[0][1]
    notice = producer.sent[1][1]
    assert notice.product.description in order.products
    assert producer.sent[0][2] == order.id


def test_return_request_chains_review(producer, catalog, faker, rng, now):
    config = DatagenConfig(return_requests=ReturnRequestConfig(review_ratio=1.0))
    topics = TopicNames()
    emitter = EventEmitter(producer, topics, config, catalog, faker, rng)

    emitter.emit_return_request(now)

    assert producer.topics() == [topics.return_requests, topics.product_reviews]


def test_duplicates_are_sent_twice(producer, catalog, faker, rng, now):
    config = DatagenConfig(
        return_requests=ReturnRequestConfig(
            timing=EventTiming(duplicate_ratio=1.0),
            review_ratio=0.0,
        )
    )
    topics = TopicNames()
    emitter = EventEmitter(producer, topics, config, catalog, faker, rng)

    emitter.emit_return_request(now)

    assert producer.topics() == [topics.return_requests, topics.return_requests]
    assert producer.sent[0][1] is producer.sent[1][1]
    assert emitter.counts[topics.return_requests] == 2


def test_tick_follows_stream_frequencies(producer, catalog, faker, rng, now):
    config = DatagenConfig(
        online_orders=OnlineOrderConfig(timing=EventTiming(frequency_ms=1000), out_of_stock_ratio=0.0),
        return_requests=ReturnRequestConfig(timing=EventTiming(frequency_ms=3000), review_ratio=0.0),
    )
    topics = TopicNames()
    emitter = EventEmitter(producer, topics, config, catalog, faker, rng)

    next_due = emitter.tick(100.0, now)
    assert next_due == 101.0
    emitter.tick(101.0, now)
    emitter.tick(102.0, now)
    emitter.tick(103.0, now)

    assert emitter.counts[topics.online_orders] == 4
    assert emitter.counts[topics.return_requests] == 2



def test_review_timestamp_uses_review_delay(producer, catalog, faker, rng, now):
    config = DatagenConfig(
        return_requests=ReturnRequestConfig(review_ratio=1.0),
        product_reviews=ProductReviewConfig(timing=EventTiming(max_delay_ms=60000)),
    )
    topics = TopicNames()
    emitter = EventEmitter(producer, topics, config, catalog, faker, rng)

    for _ in range(50):
        emitter.emit_return_request(now)

    reviews = [event for topic, event, _ in producer.sent if topic == topics.product_reviews]
    assert len(reviews) == 50
    assert all(now - timedelta(seconds=60) <= r.event_time <= now for r in reviews)
    assert any(r.event_time < now for r in reviews)


def test_emitter_uses_supplied_catalog(producer, size_issue_product, faker, rng):
    config = DatagenConfig(return_requests=ReturnRequestConfig(product_with_size_issue_ratio=1.0))
    emitter = EventEmitter(producer, TopicNames(), config, (size_issue_product,), faker, rng)
    assert emitter.return_request_generator.products_with_size_issue == (size_issue_product,)


def test_size_issue_catalog_is_reproducible():
    config = DatagenConfig(size_issue_products=2)
    first = build_size_issue_catalog(config, seed=7)
    assert len(first) == 2
    assert build_size_issue_catalog(config, seed=7) == first


def test_workers_share_one_size_issue_catalog():
    config = DatagenConfig()
    catalog = build_size_issue_catalog(config, seed=7)
    workload = WorkloadConfig(duration_seconds=0, seed=7)
    stats = queue.Queue()

    with patch('event_datagen.worker.KafkaProducer') as producer_class, \
            patch('event_datagen.worker.EventEmitter', wraps=EventEmitter) as emitter_class:
        producer_class.return_value.success_count = 0
        producer_class.return_value.error_count = 0
        for worker_id in (0, 1):
            generator_worker(worker_id, None, TopicNames(), config, catalog, workload, stats)

    catalogs = [call.args[3] for call in emitter_class.call_args_list]
    assert catalogs == [catalog, catalog]
    producer_class.return_value.close.assert_called()
    assert stats.qsize() == 2
