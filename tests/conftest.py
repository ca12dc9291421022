import random
from datetime import datetime, timezone

import pytest
from faker import Faker

from event_datagen.data import OnlineCustomer, OnlineOrder, Product


@pytest.fixture
def rng():
    """Seeded random source for reproducible generation"""
    return random.Random(42)


@pytest.fixture
def faker():
    fake = Faker('en_US')
    fake.seed_instance(42)
    return fake


@pytest.fixture
def timestamp():
    return datetime(2024, 6, 15, 14, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def size_issue_product():
    return Product('XL', 'Stonewashed', 'Bootcut')


@pytest.fixture
def make_order(timestamp):
    """Build an order holding the given product descriptions"""
    def _make_order(*descriptions):
        return OnlineOrder(
            id='order-1',
            timestamp=timestamp.isoformat(),
            customer=OnlineCustomer('customer-1', 'Jane Doe', ('jane.doe@example.com',)),
            products=tuple(descriptions),
            addresses=(),
            cost=42.0,
            event_time=timestamp,
        )
    return _make_order


@pytest.fixture
def return_request_options():
    return {
        'timings.returnrequests': 300000,
        'returnrequests.product.with.size.issue.ratio': '0.2',
        'returnrequests.products.min': 1,
        'returnrequests.products.max': 4,
        'returnrequests.product.quantity.min': 1,
        'returnrequests.product.quantity.max': 3,
        'returnrequests.reasons': 'too small, too large,changed mind',
        'returnrequests.customer.emails.min': 1,
        'returnrequests.customer.emails.max': 2,
        'returnrequests.address.phones.min': 0,
        'returnrequests.address.phones.max': 2,
        'returnrequests.reuse.address.ratio': 0.5,
        'returnrequests.review.ratio': 0.3,
    }


@pytest.fixture
def full_options(return_request_options):
    """Every option the generators read, as a flat mapping of dotted names"""
    return dict(
        return_request_options,
        **{
            'formats.timestamps': '%Y-%m-%dT%H:%M:%S',
            'timings.onlineorders': 20000,
            'eventdelays.onlineorders': 500,
            'onlineorders.products.min': 1,
            'onlineorders.products.max': 2,
            'onlineorders.customer.emails.min': 1,
            'onlineorders.customer.emails.max': 1,
            'onlineorders.address.phones.min': 1,
            'onlineorders.address.phones.max': 1,
            'onlineorders.reuse.address.ratio': 0.4,
            'onlineorders.outofstock.ratio': 0.3,
            'eventdelays.outofstocks': 1500,
            'duplicates.outofstocks': 0.1,
            'outofstocks.restocking.min.delay': 2,
            'outofstocks.restocking.max.delay': 9,
            'timings.productreviews': 60000,
            'eventdelays.productreviews': 2000,
            'productreviews.rating.min': 2,
            'productreviews.rating.max': 4,
            'products.sizes': 'S, M,L',
            'products.materials': ['Blue', 'Black'],
            'products.size.issue.count': 2,
        }
    )
