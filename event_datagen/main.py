"""
Main entry point for the retail demo event generator
"""
import argparse
import logging
import signal
import sys
import time
from multiprocessing import Process, Queue
from typing import List, Optional, Sequence

from .config import (
    DatagenConfig,
    LogConfig,
    ProducerConfig,
    TopicConfig,
    TopicNames,
    WorkloadConfig,
    load_options
)
from .admin import KafkaTopicManager
from .worker import build_size_issue_catalog, generator_worker


class DatagenApplication:
    """Main application orchestrator"""

    def __init__(
            self,
            producer_config: ProducerConfig,
            topics: TopicNames,
            datagen_config: DatagenConfig,
            workload_config: WorkloadConfig
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.producer_config = producer_config
        self.topics = topics
        self.datagen_config = datagen_config
        self.workload_config = workload_config
        # one catalog shared read-only by every worker
        self.products_with_size_issue = build_size_issue_catalog(datagen_config, workload_config.seed)

        self.workers: List[Process] = []
        self.stats_queue = Queue()

    def setup_topics(self) -> None:
        """Create the event topics that don't exist yet"""
        topic_manager = KafkaTopicManager(self.producer_config.bootstrap_servers)
        topic_manager.ensure_topics(TopicConfig(name) for name in self.topics.all())

    def start_workers(self) -> None:
        """Start all worker processes"""
        self.logger.info(
            f"Starting {self.workload_config.num_workers} workers "
            f"for {self.workload_config.duration_seconds} seconds"
        )

        for worker_id in range(self.workload_config.num_workers):
            process = Process(
                target=generator_worker,
                args=(
                    worker_id,
                    self.producer_config,
                    self.topics,
                    self.datagen_config,
                    self.products_with_size_issue,
                    self.workload_config,
                    self.stats_queue
                )
            )
            process.start()
            self.workers.append(process)

    def wait_for_completion(self) -> None:
        """Wait for all workers to complete"""
        for worker in self.workers:
            worker.join()

    def collect_statistics(self) -> dict:
        """Collect and aggregate statistics from all workers"""
        total_messages = 0
        total_errors = 0
        total_skipped = 0
        per_topic = {}

        while not self.stats_queue.empty():
            stats = self.stats_queue.get()
            total_messages += stats['message_count']
            total_errors += stats['error_count']
            total_skipped += stats['skipped']
            for topic, count in stats['per_topic'].items():
                per_topic[topic] = per_topic.get(topic, 0) + count

            self.logger.info(
                f"Worker {stats['worker_id']}: "
                f"{stats['message_count']:,} events"
            )

        return {
            'total_messages': total_messages,
            'total_errors': total_errors,
            'total_skipped': total_skipped,
            'per_topic': per_topic
        }

    def print_summary(self, stats: dict, elapsed: float) -> None:
        """Print final summary"""
        self.logger.info("=" * 80)
        self.logger.info("FINAL SUMMARY:")
        for topic, count in sorted(stats['per_topic'].items()):
            self.logger.info(f"{topic}: {count:,} events")
        self.logger.info(f"Total Events Sent: {stats['total_messages']:,}")
        self.logger.info(f"Total Errors: {stats['total_errors']:,}")
        self.logger.info(f"Skipped Out-of-stock Notices: {stats['total_skipped']:,}")
        self.logger.info(f"Total Duration: {elapsed:.2f} seconds")
        self.logger.info("=" * 80)

        if stats['total_errors']:
            self.logger.warning(f"{stats['total_errors']:,} events failed delivery")

    def run(self) -> None:
        """Run the complete generation workflow"""
        self.setup_topics()

        start_time = time.time()
        self.start_workers()

        self.wait_for_completion()
        total_elapsed = time.time() - start_time

        stats = self.collect_statistics()
        self.print_summary(stats, total_elapsed)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate retail demo events into Kafka")
    parser.add_argument('--config', help="JSON file of generator options, e.g. returnrequests.products.max")
    parser.add_argument('--bootstrap-servers', default="localhost:9092")
    parser.add_argument('--workers', type=int, default=1)
    parser.add_argument('--duration', type=int, default=300, help="Seconds to run")
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--locale', default='en_US')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None):
    """Main entry point"""
    LogConfig.setup_logging()
    args = parse_args(argv)

    producer_config = ProducerConfig(
        bootstrap_servers=args.bootstrap_servers,
        acks='all',
    )

    workload_config = WorkloadConfig(
        num_workers=args.workers,
        duration_seconds=args.duration,
        seed=args.seed,
        locale=args.locale,
    )

    # Missing options, invalid ranges or ratios fail here, before any worker starts
    if args.config:
        datagen_config = DatagenConfig.from_options(load_options(args.config))
    else:
        datagen_config = DatagenConfig()

    def signal_handler(sig, frame):
        logging.info("Interrupted! Shutting down...")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)

    app = DatagenApplication(
        producer_config=producer_config,
        topics=TopicNames(),
        datagen_config=datagen_config,
        workload_config=workload_config
    )

    app.run()


if __name__ == "__main__":
    main()
