"""
Event generators for the retail demo streams
"""
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from faker import Faker

from .config import (
    OnlineOrderConfig,
    OutOfStockConfig,
    ProductConfig,
    ProductReviewConfig,
    ReturnRequestConfig,
)
from .data import (
    BILLING_ADDRESS,
    SHIPPING_ADDRESS,
    OnlineOrder,
    OutOfStock,
    Product,
    ProductReturn,
    ProductReview,
    ReturnRequest,
)
from .exceptions import EmptyInputError
from .randomness import now_with_random_offset, random_item, random_uuid, should_do
from .values import AddressGenerator, CustomerGenerator, ProductGenerator


class EventGenerator(ABC):
    """Base class for generators that can create an event from a timestamp alone"""

    def __init__(self, faker: Optional[Faker] = None, rng: Optional[random.Random] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.faker = faker or Faker()
        self.rng = rng

    @abstractmethod
    def generate_event(self, timestamp: datetime):
        """Generate a single event stamped with ``timestamp``"""
        pass

    def _addresses(self, address_generator: AddressGenerator, reuse_ratio: float) -> tuple:
        addresses = [address_generator.generate_named(BILLING_ADDRESS)]
        # a separate shipping address only when the billing one is not reused
        if not should_do(reuse_ratio, self.rng):
            addresses.append(address_generator.generate_named(SHIPPING_ADDRESS))
        return tuple(addresses)


class ReturnRequestGenerator(EventGenerator):
    """Generate return requests for randomly chosen products"""

    def __init__(
            self,
            config: ReturnRequestConfig,
            products_with_size_issue: Sequence[Product],
            product_config: Optional[ProductConfig] = None,
            faker: Optional[Faker] = None,
            rng: Optional[random.Random] = None
    ):
        super().__init__(faker, rng)
        self.config = config
        self.timing = config.timing
        self.products_with_size_issue = tuple(products_with_size_issue)
        if config.product_with_size_issue_ratio > 0 and not self.products_with_size_issue:
            raise EmptyInputError(
                "Products with a size issue must be provided when "
                "product_with_size_issue_ratio is above 0"
            )

        self.customer_generator = CustomerGenerator(config.customer_config, self.faker, rng)
        self.address_generator = AddressGenerator(config.address_config, self.faker, rng)
        self.product_generator = ProductGenerator(product_config or ProductConfig(), rng)
        self._products = config.products_range
        self._quantity = config.quantity_range

    def generate_event(self, timestamp: datetime) -> ReturnRequest:
        """Generate a return request made at ``timestamp``"""
        customer = self.customer_generator.generate()
        addresses = self._addresses(self.address_generator, self.config.reuse_address_ratio)

        returns: List[ProductReturn] = []
        for _ in range(self._products.sample(self.rng)):
            quantity = self._quantity.sample(self.rng)
            product = self.product_generator.pick(
                self.products_with_size_issue,
                self.config.product_with_size_issue_ratio
            )
            reason = random_item(self.config.reasons, self.rng)
            returns.append(ProductReturn(product, quantity, reason))

        return ReturnRequest(
            id=random_uuid(self.rng),
            timestamp=self.timing.format_timestamp(timestamp),
            customer=customer,
            addresses=addresses,
            returns=tuple(returns),
            event_time=timestamp,
        )

    def should_review(self) -> bool:
        """Whether a return request should be followed by a product review"""
        return should_do(self.config.review_ratio, self.rng)


class OnlineOrderGenerator(EventGenerator):
    """Generate online orders for generic products"""

    def __init__(
            self,
            config: OnlineOrderConfig,
            product_config: Optional[ProductConfig] = None,
            faker: Optional[Faker] = None,
            rng: Optional[random.Random] = None
    ):
        super().__init__(faker, rng)
        self.config = config
        self.timing = config.timing
        self.customer_generator = CustomerGenerator(config.customer_config, self.faker, rng)
        self.address_generator = AddressGenerator(config.address_config, self.faker, rng)
        self.product_generator = ProductGenerator(product_config or ProductConfig(), rng)
        self._products = config.products_range

    def generate_event(self, timestamp: datetime) -> OnlineOrder:
        product_count = self._products.sample(self.rng)
        products = tuple(
            self.product_generator.generate().description for _ in range(product_count)
        )
        cost = round((self.rng or random).uniform(self.config.min_cost, self.config.max_cost), 2)
        return OnlineOrder(
            id=random_uuid(self.rng),
            timestamp=self.timing.format_timestamp(timestamp),
            customer=self.customer_generator.generate(),
            products=products,
            addresses=self._addresses(self.address_generator, self.config.reuse_address_ratio),
            cost=cost,
            event_time=timestamp,
        )

    def should_report_out_of_stock(self) -> bool:
        """Whether an order should be followed by an out-of-stock notice"""
        return should_do(self.config.out_of_stock_ratio, self.rng)


class OutOfStockGenerator:
    """
    Generate out-of-stock notices for products of an existing order

    There is no timestamp-only variant: a notice always refers to an order.
    """

    def __init__(self, config: OutOfStockConfig, rng: Optional[random.Random] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.timing = config.timing
        self.rng = rng
        self._restocking = config.restocking_range

    def generate(self, order: OnlineOrder, now: Optional[datetime] = None) -> Optional[OutOfStock]:
        """
        Report one of the order's products as out of stock

        Returns None when the chosen product description can't be parsed.
        """
        description = random_item(order.products, self.rng)
        product = Product.parse_description(description)
        if product is None:
            self.logger.debug(f"Skipping unparsable product description: {description!r}")
            return None

        date_time = now_with_random_offset(self.config.max_jitter_secs, self.rng, now)
        restocking_delay = self._restocking.sample(self.rng)
        return OutOfStock(
            id=random_uuid(self.rng),
            timestamp=int(date_time.timestamp() * 1000),
            product=product,
            restocking_date=date_time.date() + timedelta(days=restocking_delay),
            event_time=date_time,
        )


class ProductReviewGenerator:
    """Generate a review for one product of a return request"""

    def __init__(
            self,
            config: ProductReviewConfig,
            faker: Optional[Faker] = None,
            rng: Optional[random.Random] = None
    ):
        self.config = config
        self.timing = config.timing
        self.faker = faker or Faker()
        self.rng = rng
        self._rating = config.rating_range

    def generate(self, return_request: ReturnRequest, timestamp: Optional[datetime] = None) -> ProductReview:
        timestamp = timestamp or datetime.now(timezone.utc)
        product_return = random_item(return_request.returns, self.rng)
        return ProductReview(
            id=random_uuid(self.rng),
            timestamp=self.timing.format_timestamp(timestamp),
            product=product_return.product,
            customer=return_request.customer,
            rating=self._rating.sample(self.rng),
            review=f"{product_return.reason.capitalize()}. {self.faker.sentence()}",
            event_time=timestamp,
        )
