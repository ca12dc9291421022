"""
Worker process that generates events on a schedule and publishes them
"""
import logging
import random
import time
from collections import Counter
from datetime import datetime, timezone
from multiprocessing import Queue
from typing import Any, Dict, Optional, Sequence, Tuple

from faker import Faker

from .config import DatagenConfig, EventTiming, ProducerConfig, TopicNames, WorkloadConfig
from .data import Product
from .generator import (
    OnlineOrderGenerator,
    OutOfStockGenerator,
    ProductReviewGenerator,
    ReturnRequestGenerator,
)
from .producer import KafkaProducer
from .values import ProductGenerator


def build_size_issue_catalog(config: DatagenConfig, seed: Optional[int] = None) -> Tuple[Product, ...]:
    """Pick the products flagged with a size issue, once for all workers"""
    catalog = ProductGenerator(config.products, random.Random(seed)).catalog(config.size_issue_products)
    logger = logging.getLogger("SizeIssueCatalog")
    logger.info(f"Products with a size issue: {', '.join(p.description for p in catalog)}")
    return catalog


class EventEmitter:
    """
    Drives the generators and hands their events to a producer

    Orders and return requests run on their own cadence. Out-of-stock
    notices and product reviews are chained off them.
    """

    def __init__(
            self,
            producer,
            topics: TopicNames,
            config: DatagenConfig,
            products_with_size_issue: Sequence[Product],
            faker: Optional[Faker] = None,
            rng: Optional[random.Random] = None
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.producer = producer
        self.topics = topics
        self.config = config
        self.rng = rng
        faker = faker or Faker()

        self.order_generator = OnlineOrderGenerator(config.online_orders, config.products, faker, rng)
        self.out_of_stock_generator = OutOfStockGenerator(config.out_of_stocks, rng)
        self.return_request_generator = ReturnRequestGenerator(
            config.return_requests, products_with_size_issue, config.products, faker, rng
        )
        self.review_generator = ProductReviewGenerator(config.product_reviews, faker, rng)

        self.counts: Counter = Counter()
        self.skipped = 0
        self._next_due: Dict[str, float] = {}

    def publish(self, topic: str, event: Any, timing: EventTiming) -> None:
        """Send an event, sometimes twice to simulate duplicate delivery"""
        self.producer.send(topic, event, key=event.key)
        self.counts[topic] += 1
        if timing.should_duplicate(self.rng):
            self.producer.send(topic, event, key=event.key)
            self.counts[topic] += 1

    def emit_online_order(self, now: datetime) -> None:
        timing = self.order_generator.timing
        order = self.order_generator.generate_event(timing.delayed_timestamp(now, self.rng))
        self.publish(self.topics.online_orders, order, timing)

        if self.order_generator.should_report_out_of_stock():
            out_of_stock = self.out_of_stock_generator.generate(order)
            if out_of_stock is None:
                # unparsable product: skip the notice, the order stands
                self.skipped += 1
                return
            self.publish(self.topics.out_of_stocks, out_of_stock, self.out_of_stock_generator.timing)

    def emit_return_request(self, now: datetime) -> None:
        timing = self.return_request_generator.timing
        request = self.return_request_generator.generate_event(timing.delayed_timestamp(now, self.rng))
        self.publish(self.topics.return_requests, request, timing)

        if self.return_request_generator.should_review():
            review_timing = self.review_generator.timing
            review = self.review_generator.generate(request, review_timing.delayed_timestamp(now, self.rng))
            self.publish(self.topics.product_reviews, review, review_timing)

    def tick(self, clock: float, now: Optional[datetime] = None) -> float:
        """
        Emit every stream that is due at ``clock`` (monotonic seconds)

        Returns the clock value of the next due emission.
        """
        now = now or datetime.now(timezone.utc)
        streams = (
            ('online_orders', self.order_generator.timing, self.emit_online_order),
            ('return_requests', self.return_request_generator.timing, self.emit_return_request),
        )
        for name, timing, emit in streams:
            due = self._next_due.setdefault(name, clock)
            if clock >= due:
                emit(now)
                self._next_due[name] = due + timing.frequency_ms / 1000
        return min(self._next_due.values())


def generator_worker(
        worker_id: int,
        producer_config: ProducerConfig,
        topics: TopicNames,
        datagen_config: DatagenConfig,
        products_with_size_issue: Sequence[Product],
        workload_config: WorkloadConfig,
        stats_queue: Queue
) -> None:
    """
    Worker process that generates and publishes events until its time is up

    Args:
        worker_id: Unique worker identifier
        producer_config: Producer configuration
        topics: Target topic for each event stream
        datagen_config: Generator configuration
        products_with_size_issue: Size-issue catalog shared by every worker
        workload_config: Duration, seed and locale
        stats_queue: Queue to send statistics back to main process
    """
    logger = logging.getLogger(f"Worker-{worker_id}")
    logger.info(f"Worker {worker_id} starting...")

    seed = None if workload_config.seed is None else workload_config.seed + worker_id
    rng = random.Random(seed)
    faker = Faker(workload_config.locale)
    if seed is not None:
        faker.seed_instance(seed)

    producer = KafkaProducer(producer_config, process_id=worker_id)
    emitter = EventEmitter(producer, topics, datagen_config, products_with_size_issue, faker, rng)

    start_time = time.monotonic()
    deadline = start_time + workload_config.duration_seconds

    try:
        while True:
            clock = time.monotonic()
            if clock >= deadline:
                break
            next_due = emitter.tick(clock)
            time.sleep(max(0.0, min(next_due, deadline) - time.monotonic()))

        producer.close()

        elapsed = time.monotonic() - start_time
        message_count = sum(emitter.counts.values())
        logger.info(
            f"Worker {worker_id} completed: "
            f"{message_count:,} events in {elapsed:.2f}s "
            f"({emitter.skipped} out-of-stock notices skipped)"
        )

        stats: Dict[str, Any] = {
            'worker_id': worker_id,
            'message_count': message_count,
            'per_topic': dict(emitter.counts),
            'skipped': emitter.skipped,
            'success_count': producer.success_count,
            'error_count': producer.error_count,
            'elapsed': elapsed,
        }
        stats_queue.put(stats)

    except KeyboardInterrupt:
        logger.info(f"Worker {worker_id} interrupted")
        producer.flush()
    except Exception as e:
        logger.error(f"Worker {worker_id} error: {e}", exc_info=True)
        producer.flush()
        raise
