"""
Configuration classes for the event generators and the Kafka harness
"""
import json
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .exceptions import InvalidConfigurationError
from .randomness import BoundedRange, check_ratio, random_int, should_do

DEFAULT_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S.%f'

DEFAULT_REASONS = (
    'poor quality',
    'unwanted gift',
    'changed mind',
    'too small',
    'too large',
    'colour not as described',
)

_MISSING = object()


def _option(options: Mapping[str, Any], key: str, cast: Callable, default: Any = _MISSING) -> Any:
    """Read one named option, failing fast when it is absent or malformed"""
    value = options.get(key, default)
    if value is _MISSING:
        raise InvalidConfigurationError(f"Missing required option '{key}'")
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"Invalid value for option '{key}': {value!r}") from e


def load_options(path: str) -> Dict[str, Any]:
    """Read a flat JSON object of dotted option names"""
    try:
        with open(path, encoding='utf-8') as f:
            options = json.load(f)
    except (OSError, ValueError) as e:
        raise InvalidConfigurationError(f"Cannot read options from {path}: {e}") from e
    if not isinstance(options, dict):
        raise InvalidConfigurationError(f"Options in {path} must be a JSON object")
    return options


def _check_range(name: str, minimum: int, maximum: int) -> None:
    if minimum > maximum:
        raise InvalidConfigurationError(
            f"Invalid {name} range: minimum {minimum} > maximum {maximum}"
        )


def _string_list(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(item.strip() for item in value.split(',') if item.strip())
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class EventTiming:
    """Cadence, lateness, duplication and timestamp format of one event stream"""
    frequency_ms: int = 10000
    max_delay_ms: int = 0
    duplicate_ratio: float = 0.0
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT

    def __post_init__(self):
        if self.frequency_ms <= 0:
            raise InvalidConfigurationError(f"frequency_ms must be positive, got {self.frequency_ms}")
        if self.max_delay_ms < 0:
            raise InvalidConfigurationError(f"max_delay_ms must not be negative, got {self.max_delay_ms}")
        check_ratio('duplicate_ratio', self.duplicate_ratio)

    @classmethod
    def from_options(cls, options: Mapping[str, Any], stream: str,
                     format_key: str = 'formats.timestamps') -> 'EventTiming':
        return cls(
            frequency_ms=_option(options, f'timings.{stream}', int),
            max_delay_ms=_option(options, f'eventdelays.{stream}', int, 0),
            duplicate_ratio=_option(options, f'duplicates.{stream}', float, 0.0),
            timestamp_format=_option(options, format_key, str, DEFAULT_TIMESTAMP_FORMAT),
        )

    def format_timestamp(self, timestamp: datetime) -> str:
        return timestamp.strftime(self.timestamp_format)

    def should_duplicate(self, rng: Optional[random.Random] = None) -> bool:
        return should_do(self.duplicate_ratio, rng)

    def delayed_timestamp(self, now: datetime, rng: Optional[random.Random] = None) -> datetime:
        """Pull ``now`` back by up to max_delay_ms to simulate a late event"""
        if self.max_delay_ms == 0:
            return now
        return now - timedelta(milliseconds=random_int(0, self.max_delay_ms, rng))


@dataclass(frozen=True)
class ProductConfig:
    """Building blocks for generic products"""
    sizes: Tuple[str, ...] = ('XXS', 'XS', 'S', 'M', 'L', 'XL', 'XXL')
    materials: Tuple[str, ...] = ('Classic', 'Retro', 'Navy', 'Stonewashed', 'Acid-washed',
                                  'Blue', 'Black', 'White', 'Khaki', 'Denim')
    styles: Tuple[str, ...] = ('Skinny', 'Bootcut', 'Flare', 'Ripped', 'Capri',
                               'Jogger', 'Crochet', 'High-waist', 'Low-rise', 'Straight-leg',
                               'Boyfriend', 'Mom', 'Wide-leg', 'Cropped')

    def __post_init__(self):
        for name in ('sizes', 'materials', 'styles'):
            values = getattr(self, name)
            if not values:
                raise InvalidConfigurationError(f"Product {name} must not be empty")
            # descriptions are space separated, so every part must be one word
            if any(not value or ' ' in value for value in values):
                raise InvalidConfigurationError(f"Product {name} must be single words: {values}")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'ProductConfig':
        defaults = cls()
        return cls(
            sizes=_option(options, 'products.sizes', _string_list, defaults.sizes),
            materials=_option(options, 'products.materials', _string_list, defaults.materials),
            styles=_option(options, 'products.styles', _string_list, defaults.styles),
        )


@dataclass(frozen=True)
class AddressConfig:
    min_phones: int = 1
    max_phones: int = 2
    # None = the country of the Faker locale
    country_code: Optional[str] = None
    country_name: Optional[str] = None

    def __post_init__(self):
        _check_range('phones', self.min_phones, self.max_phones)

    @property
    def phones_range(self) -> BoundedRange:
        return BoundedRange(self.min_phones, self.max_phones)


@dataclass(frozen=True)
class CustomerConfig:
    min_emails: int = 1
    max_emails: int = 2

    def __post_init__(self):
        _check_range('emails', self.min_emails, self.max_emails)

    @property
    def emails_range(self) -> BoundedRange:
        return BoundedRange(self.min_emails, self.max_emails)


@dataclass(frozen=True)
class ReturnRequestConfig:
    """
    Settings for return request events

    Ratios are probabilities between 0.0 (never) and 1.0 (always).
    """
    timing: EventTiming = field(default_factory=lambda: EventTiming(frequency_ms=300000))
    # share of returned products drawn from the size-issue list
    product_with_size_issue_ratio: float = 0.1
    min_products: int = 1
    max_products: int = 3
    min_quantity: int = 1
    max_quantity: int = 2
    reasons: Tuple[str, ...] = DEFAULT_REASONS
    min_emails: int = 1
    max_emails: int = 2
    min_phones: int = 1
    max_phones: int = 2
    # share of requests where shipping and billing address are the same
    reuse_address_ratio: float = 0.55
    # share of requests followed by a product review
    review_ratio: float = 0.32

    def __post_init__(self):
        check_ratio('product_with_size_issue_ratio', self.product_with_size_issue_ratio)
        check_ratio('reuse_address_ratio', self.reuse_address_ratio)
        check_ratio('review_ratio', self.review_ratio)
        if self.min_products < 1:
            raise InvalidConfigurationError("A return request needs at least one product")
        if self.min_quantity < 1:
            raise InvalidConfigurationError("Returned quantities must be at least 1")
        if not self.reasons:
            raise InvalidConfigurationError("At least one return reason is required")
        _check_range('products', self.min_products, self.max_products)
        _check_range('quantity', self.min_quantity, self.max_quantity)
        _check_range('emails', self.min_emails, self.max_emails)
        _check_range('phones', self.min_phones, self.max_phones)

    @property
    def products_range(self) -> BoundedRange:
        return BoundedRange(self.min_products, self.max_products)

    @property
    def quantity_range(self) -> BoundedRange:
        return BoundedRange(self.min_quantity, self.max_quantity)

    @property
    def address_config(self) -> AddressConfig:
        return AddressConfig(self.min_phones, self.max_phones)

    @property
    def customer_config(self) -> CustomerConfig:
        return CustomerConfig(self.min_emails, self.max_emails)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'ReturnRequestConfig':
        return cls(
            timing=EventTiming.from_options(options, 'returnrequests', 'formats.timestamps.ltz'),
            product_with_size_issue_ratio=_option(
                options, 'returnrequests.product.with.size.issue.ratio', float),
            min_products=_option(options, 'returnrequests.products.min', int),
            max_products=_option(options, 'returnrequests.products.max', int),
            min_quantity=_option(options, 'returnrequests.product.quantity.min', int),
            max_quantity=_option(options, 'returnrequests.product.quantity.max', int),
            reasons=_option(options, 'returnrequests.reasons', _string_list),
            min_emails=_option(options, 'returnrequests.customer.emails.min', int),
            max_emails=_option(options, 'returnrequests.customer.emails.max', int),
            min_phones=_option(options, 'returnrequests.address.phones.min', int),
            max_phones=_option(options, 'returnrequests.address.phones.max', int),
            reuse_address_ratio=_option(options, 'returnrequests.reuse.address.ratio', float),
            review_ratio=_option(options, 'returnrequests.review.ratio', float),
        )


@dataclass(frozen=True)
class OnlineOrderConfig:
    """Settings for online order events"""
    timing: EventTiming = field(default_factory=lambda: EventTiming(frequency_ms=30000))
    min_products: int = 1
    max_products: int = 5
    min_emails: int = 1
    max_emails: int = 2
    min_phones: int = 1
    max_phones: int = 2
    reuse_address_ratio: float = 0.55
    # share of orders that report one of their products out of stock
    out_of_stock_ratio: float = 0.22
    min_cost: float = 10.0
    max_cost: float = 200.0

    def __post_init__(self):
        check_ratio('reuse_address_ratio', self.reuse_address_ratio)
        check_ratio('out_of_stock_ratio', self.out_of_stock_ratio)
        if self.min_products < 1:
            raise InvalidConfigurationError("An order needs at least one product")
        if self.min_cost > self.max_cost:
            raise InvalidConfigurationError(
                f"Invalid cost range: minimum {self.min_cost} > maximum {self.max_cost}"
            )
        _check_range('products', self.min_products, self.max_products)
        _check_range('emails', self.min_emails, self.max_emails)
        _check_range('phones', self.min_phones, self.max_phones)

    @property
    def products_range(self) -> BoundedRange:
        return BoundedRange(self.min_products, self.max_products)

    @property
    def address_config(self) -> AddressConfig:
        return AddressConfig(self.min_phones, self.max_phones)

    @property
    def customer_config(self) -> CustomerConfig:
        return CustomerConfig(self.min_emails, self.max_emails)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'OnlineOrderConfig':
        return cls(
            timing=EventTiming.from_options(options, 'onlineorders'),
            min_products=_option(options, 'onlineorders.products.min', int),
            max_products=_option(options, 'onlineorders.products.max', int),
            min_emails=_option(options, 'onlineorders.customer.emails.min', int),
            max_emails=_option(options, 'onlineorders.customer.emails.max', int),
            min_phones=_option(options, 'onlineorders.address.phones.min', int),
            max_phones=_option(options, 'onlineorders.address.phones.max', int),
            reuse_address_ratio=_option(options, 'onlineorders.reuse.address.ratio', float),
            out_of_stock_ratio=_option(options, 'onlineorders.outofstock.ratio', float),
            min_cost=_option(options, 'onlineorders.cost.min', float, 10.0),
            max_cost=_option(options, 'onlineorders.cost.max', float, 200.0),
        )


@dataclass(frozen=True)
class OutOfStockConfig:
    """Settings for out-of-stock notices, delays are in days"""
    timing: EventTiming = field(default_factory=lambda: EventTiming(frequency_ms=30000))
    restocking_min_delay: int = 1
    restocking_max_delay: int = 5
    # upper bound of the jitter added to the generation time
    max_jitter_secs: int = 10

    def __post_init__(self):
        if self.restocking_min_delay < 0:
            raise InvalidConfigurationError("Restocking delay must not be negative")
        if self.max_jitter_secs < 0:
            raise InvalidConfigurationError("max_jitter_secs must not be negative")
        _check_range('restocking delay', self.restocking_min_delay, self.restocking_max_delay)

    @property
    def restocking_range(self) -> BoundedRange:
        return BoundedRange(self.restocking_min_delay, self.restocking_max_delay)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'OutOfStockConfig':
        # out-of-stock notices are driven by orders, so they share the order cadence
        return cls(
            timing=EventTiming(
                frequency_ms=_option(options, 'timings.onlineorders', int),
                max_delay_ms=_option(options, 'eventdelays.outofstocks', int, 0),
                duplicate_ratio=_option(options, 'duplicates.outofstocks', float, 0.0),
                timestamp_format=_option(options, 'formats.timestamps', str, DEFAULT_TIMESTAMP_FORMAT),
            ),
            restocking_min_delay=_option(options, 'outofstocks.restocking.min.delay', int),
            restocking_max_delay=_option(options, 'outofstocks.restocking.max.delay', int),
        )


@dataclass(frozen=True)
class ProductReviewConfig:
    timing: EventTiming = field(default_factory=lambda: EventTiming(frequency_ms=300000))
    min_rating: int = 1
    max_rating: int = 5

    def __post_init__(self):
        _check_range('rating', self.min_rating, self.max_rating)

    @property
    def rating_range(self) -> BoundedRange:
        return BoundedRange(self.min_rating, self.max_rating)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'ProductReviewConfig':
        return cls(
            timing=EventTiming.from_options(options, 'productreviews'),
            min_rating=_option(options, 'productreviews.rating.min', int, 1),
            max_rating=_option(options, 'productreviews.rating.max', int, 5),
        )


@dataclass
class ProducerConfig:
    """Producer configuration with demo-friendly defaults"""

    # Connection
    bootstrap_servers: str = "localhost:9092"

    # Batching
    linger_ms: int = 10

    # Compression
    compression_type: str = 'lz4'

    # Reliability vs Speed
    acks: str = 'all'

    # Retries
    retries: int = 3
    retry_backoff_ms: int = 100

    # Timeouts
    request_timeout_ms: int = 30000
    delivery_timeout_ms: int = 120000

    enable_idempotence: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to Kafka producer config dict"""
        return {
            'bootstrap.servers': self.bootstrap_servers,
            'linger.ms': self.linger_ms,
            'compression.type': self.compression_type,
            'acks': self.acks,
            'retries': self.retries,
            'retry.backoff.ms': self.retry_backoff_ms,
            'request.timeout.ms': self.request_timeout_ms,
            'delivery.timeout.ms': self.delivery_timeout_ms,
            'enable.idempotence': self.enable_idempotence,
        }


@dataclass
class TopicConfig:
    """Topic configuration"""
    name: str
    num_partitions: int = 1
    replication_factor: int = 1
    compression_type: str = 'lz4'
    min_insync_replicas: str = '1'

    def get_topic_config(self) -> Dict[str, str]:
        """Get topic-level config"""
        return {
            'compression.type': self.compression_type,
            'min.insync.replicas': self.min_insync_replicas
        }


@dataclass
class TopicNames:
    """Target topic for each event stream"""
    online_orders: str = 'ORDERS.ONLINE'
    out_of_stocks: str = 'STOCK.NOSTOCK'
    return_requests: str = 'PRODUCT.RETURNS'
    product_reviews: str = 'PRODUCT.REVIEWS'

    def all(self) -> Tuple[str, ...]:
        return (self.online_orders, self.out_of_stocks, self.return_requests, self.product_reviews)


@dataclass
class WorkloadConfig:
    """Workload configuration"""
    num_workers: int = 1
    duration_seconds: int = 60
    seed: Optional[int] = None  # None = nondeterministic
    locale: str = 'en_US'


@dataclass
class DatagenConfig:
    """Everything the generators need, grouped per event stream"""
    products: ProductConfig = field(default_factory=ProductConfig)
    online_orders: OnlineOrderConfig = field(default_factory=OnlineOrderConfig)
    out_of_stocks: OutOfStockConfig = field(default_factory=OutOfStockConfig)
    return_requests: ReturnRequestConfig = field(default_factory=ReturnRequestConfig)
    product_reviews: ProductReviewConfig = field(default_factory=ProductReviewConfig)
    # number of catalog products flagged with a size issue
    size_issue_products: int = 3

    def __post_init__(self):
        if self.size_issue_products < 1:
            raise InvalidConfigurationError("At least one product with a size issue is required")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'DatagenConfig':
        return cls(
            products=ProductConfig.from_options(options),
            online_orders=OnlineOrderConfig.from_options(options),
            out_of_stocks=OutOfStockConfig.from_options(options),
            return_requests=ReturnRequestConfig.from_options(options),
            product_reviews=ProductReviewConfig.from_options(options),
            size_issue_products=_option(options, 'products.size.issue.count', int, 3),
        )


class LogConfig:
    """Logging configuration"""

    @staticmethod
    def setup_logging(level=logging.INFO):
        """Setup logging configuration"""
        logging.basicConfig(
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            level=level,
            datefmt='%Y-%m-%d %H:%M:%S'
        )
