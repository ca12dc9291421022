"""
Generators for the values that make up an event: addresses, customers and products
"""
import random
from typing import Optional, Sequence

from faker import Faker

from .config import AddressConfig, CustomerConfig, ProductConfig
from .data import Address, Country, NamedAddress, OnlineCustomer, Product
from .randomness import random_item, random_uuid, should_do


class AddressGenerator:
    """Random postal addresses in the configured country, or the Faker locale's"""

    def __init__(self, config: AddressConfig, faker: Faker, rng: Optional[random.Random] = None):
        self.config = config
        self.faker = faker
        self.rng = rng
        if config.country_code is None:
            self.country = Country(faker.current_country_code(), faker.current_country())
        else:
            self.country = Country(config.country_code, config.country_name or config.country_code)
        self._phones = config.phones_range

    def generate(self) -> Address:
        phone_count = self._phones.sample(self.rng)
        return Address(
            number=self.faker.building_number(),
            street=self.faker.street_name(),
            city=self.faker.city(),
            zipcode=self.faker.postcode(),
            country=self.country,
            phones=tuple(self.faker.phone_number() for _ in range(phone_count)),
        )

    def generate_named(self, name: str) -> NamedAddress:
        return NamedAddress(name, self.generate())


class CustomerGenerator:
    """Random online customers with one or more emails"""

    def __init__(self, config: CustomerConfig, faker: Faker, rng: Optional[random.Random] = None):
        self.config = config
        self.faker = faker
        self.rng = rng
        self._emails = config.emails_range

    def generate(self) -> OnlineCustomer:
        first_name = self.faker.first_name()
        last_name = self.faker.last_name()
        email_count = self._emails.sample(self.rng)
        emails = []
        while len(emails) < email_count:
            email = f"{first_name}.{last_name}{len(emails) or ''}@{self.faker.free_email_domain()}".lower()
            if email not in emails:
                emails.append(email)
        return OnlineCustomer(
            id=random_uuid(self.rng),
            name=f"{first_name} {last_name}",
            emails=tuple(emails),
        )


class ProductGenerator:
    """Generic products assembled from the configured sizes, materials and styles"""

    def __init__(self, config: ProductConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng

    def generate(self) -> Product:
        return Product(
            size=random_item(self.config.sizes, self.rng),
            material=random_item(self.config.materials, self.rng),
            style=random_item(self.config.styles, self.rng),
        )

    def pick(self, candidates: Sequence[Product], ratio: float) -> Product:
        """Draw from ``candidates`` with probability ``ratio``, otherwise synthesize one"""
        if should_do(ratio, self.rng):
            return random_item(candidates, self.rng)
        return self.generate()

    def catalog(self, count: int) -> tuple:
        """Distinct products, e.g. the ones flagged with a size issue"""
        total = len(self.config.sizes) * len(self.config.materials) * len(self.config.styles)
        count = min(count, total)
        products = []
        while len(products) < count:
            product = self.generate()
            if product not in products:
                products.append(product)
        return tuple(products)
