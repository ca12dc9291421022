"""
Immutable records for the generated business events
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

BILLING_ADDRESS = "Billing address"
SHIPPING_ADDRESS = "Shipping address"

_DESCRIPTION_PATTERN = re.compile(
    r'^\s*(?P<size>\S+)\s+(?P<material>\S+)\s+(?P<style>\S+)\s+jeans\s*$',
    re.IGNORECASE
)


@dataclass(frozen=True)
class Country:
    code: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'name': self.name}


@dataclass(frozen=True)
class Address:
    number: str
    street: str
    city: str
    zipcode: str
    country: Country
    phones: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'street': self.street,
            'city': self.city,
            'zipcode': self.zipcode,
            'country': self.country.to_dict(),
            'phones': list(self.phones),
        }


@dataclass(frozen=True)
class NamedAddress:
    """Address tagged with its role in an event"""
    name: str
    address: Address

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, **self.address.to_dict()}


@dataclass(frozen=True)
class OnlineCustomer:
    id: str
    name: str
    emails: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'emails': list(self.emails)}


@dataclass(frozen=True)
class Product:
    """Catalog item, identified by size, material and style"""
    size: str
    material: str
    style: str

    @property
    def description(self) -> str:
        return f"{self.size} {self.material} {self.style} Jeans"

    @classmethod
    def parse_description(cls, description: Optional[str]) -> Optional['Product']:
        """Rebuild a product from its description, or None if it can't be parsed"""
        if not description:
            return None
        match = _DESCRIPTION_PATTERN.match(description)
        if match is None:
            return None
        return cls(match['size'], match['material'], match['style'])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'description': self.description,
            'size': self.size,
            'material': self.material,
            'style': self.style,
        }


@dataclass(frozen=True)
class ProductReturn:
    product: Product
    quantity: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product': self.product.to_dict(),
            'quantity': self.quantity,
            'reason': self.reason,
        }


@dataclass(frozen=True)
class ReturnRequest:
    id: str
    timestamp: str
    customer: OnlineCustomer
    addresses: Tuple[NamedAddress, ...]
    returns: Tuple[ProductReturn, ...]
    event_time: datetime = field(compare=False)

    @property
    def key(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'customer': self.customer.to_dict(),
            'addresses': [a.to_dict() for a in self.addresses],
            'returns': [r.to_dict() for r in self.returns],
        }


@dataclass(frozen=True)
class OnlineOrder:
    id: str
    timestamp: str
    customer: OnlineCustomer
    products: Tuple[str, ...]
    addresses: Tuple[NamedAddress, ...]
    cost: float
    event_time: datetime = field(compare=False)

    @property
    def key(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'customer': self.customer.to_dict(),
            'products': list(self.products),
            'addresses': [a.to_dict() for a in self.addresses],
            'cost': self.cost,
        }


@dataclass(frozen=True)
class OutOfStock:
    id: str
    timestamp: int  # epoch millis
    product: Product
    restocking_date: date
    event_time: datetime = field(compare=False)

    @property
    def key(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'product': self.product.to_dict(),
            'restocking_date': self.restocking_date.isoformat(),
        }


@dataclass(frozen=True)
class ProductReview:
    id: str
    timestamp: str
    product: Product
    customer: OnlineCustomer
    rating: int
    review: str
    event_time: datetime = field(compare=False)

    @property
    def key(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'product': self.product.to_dict(),
            'customer': self.customer.to_dict(),
            'rating': self.rating,
            'review': self.review,
        }
