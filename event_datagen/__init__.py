"""
Retail demo event generator
Synthesizes orders, return requests, out-of-stock notices and reviews for Kafka
"""

__version__ = "1.0.0"

from .config import (
    DatagenConfig,
    EventTiming,
    LogConfig,
    OnlineOrderConfig,
    OutOfStockConfig,
    ProducerConfig,
    ProductConfig,
    ProductReviewConfig,
    ReturnRequestConfig,
    TopicNames,
)
from .exceptions import DatagenError, EmptyInputError, InvalidConfigurationError
from .generator import (
    OnlineOrderGenerator,
    OutOfStockGenerator,
    ProductReviewGenerator,
    ReturnRequestGenerator,
)
from .worker import EventEmitter, build_size_issue_catalog, generator_worker

__all__ = [
    'DatagenConfig',
    'EventTiming',
    'LogConfig',
    'OnlineOrderConfig',
    'OutOfStockConfig',
    'ProducerConfig',
    'ProductConfig',
    'ProductReviewConfig',
    'ReturnRequestConfig',
    'TopicNames',
    'DatagenError',
    'EmptyInputError',
    'InvalidConfigurationError',
    'OnlineOrderGenerator',
    'OutOfStockGenerator',
    'ProductReviewGenerator',
    'ReturnRequestGenerator',
    'EventEmitter',
    'build_size_issue_catalog',
    'generator_worker'
]
