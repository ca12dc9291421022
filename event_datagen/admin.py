"""
Kafka topic administration for the event streams
"""
import logging
from confluent_kafka.admin import AdminClient, NewTopic
from typing import Iterable, List

from .config import TopicConfig


class KafkaTopicManager:
    """Makes sure every event stream has a topic to publish to"""

    def __init__(self, bootstrap_servers: str):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.bootstrap_servers = bootstrap_servers

        try:
            self.admin_client = AdminClient({'bootstrap.servers': bootstrap_servers})
            self.logger.info("AdminClient initialized successfully")
        except Exception as e:
            self.logger.error(f"Failed to initialize AdminClient: {e}")
            raise

    def list_topics(self) -> List[str]:
        """List all topics"""
        try:
            topic_metadata = self.admin_client.list_topics(timeout=10)
            return list(topic_metadata.topics.keys())
        except Exception as e:
            self.logger.error(f"Error listing topics: {e}")
            raise

    def ensure_topics(self, topic_configs: Iterable[TopicConfig]) -> List[str]:
        """Create the topics that don't exist yet, returning the names created"""
        existing = set(self.list_topics())
        missing = [config for config in topic_configs if config.name not in existing]
        if not missing:
            self.logger.info("All event topics already exist")
            return []

        new_topics = [
            NewTopic(
                config.name,
                num_partitions=config.num_partitions,
                replication_factor=config.replication_factor,
                config=config.get_topic_config()
            )
            for config in missing
        ]
        fs = self.admin_client.create_topics(new_topics)

        created = []
        for name, future in fs.items():
            try:
                future.result()
                created.append(name)
                self.logger.info(f"Topic '{name}' created successfully")
            except Exception as e:
                self.logger.error(f"Failed to create topic '{name}': {e}")
                raise
        return created
