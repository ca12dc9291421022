"""
Random primitives shared by the value and event generators
"""
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence, TypeVar

from .exceptions import EmptyInputError, InvalidConfigurationError

T = TypeVar('T')


def check_ratio(name: str, ratio: float) -> None:
    """Reject ratios outside [0.0, 1.0]"""
    if not 0.0 <= ratio <= 1.0:
        raise InvalidConfigurationError(
            f"{name} must be between 0.0 and 1.0, got {ratio}"
        )


def should_do(ratio: float, rng: Optional[random.Random] = None) -> bool:
    """Return True with probability ``ratio``"""
    if ratio <= 0.0:
        return False
    if ratio >= 1.0:
        return True
    return (rng or random).random() < ratio


@dataclass(frozen=True)
class BoundedRange:
    """Inclusive integer range, validated once at construction"""
    minimum: int
    maximum: int

    def __post_init__(self):
        if self.minimum > self.maximum:
            raise InvalidConfigurationError(
                f"Invalid range: minimum {self.minimum} > maximum {self.maximum}"
            )

    def sample(self, rng: Optional[random.Random] = None) -> int:
        if self.minimum == self.maximum:
            return self.minimum
        return (rng or random).randint(self.minimum, self.maximum)

    def __contains__(self, value: int) -> bool:
        return self.minimum <= value <= self.maximum


def random_int(minimum: int, maximum: int, rng: Optional[random.Random] = None) -> int:
    """Uniform integer in [minimum, maximum]"""
    return BoundedRange(minimum, maximum).sample(rng)


def random_item(items: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Pick one element of ``items`` uniformly"""
    if not items:
        raise EmptyInputError("Cannot pick a random item from an empty list")
    return (rng or random).choice(items)


def random_uuid(rng: Optional[random.Random] = None) -> str:
    """UUID4 string, reproducible when drawn from a seeded rng"""
    if rng is None:
        return str(uuid.uuid4())
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def now_with_random_offset(
        max_offset_secs: int,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None
) -> datetime:
    """Current UTC time pushed forward by up to ``max_offset_secs`` seconds"""
    base = now or datetime.now(timezone.utc)
    offset_ms = random_int(0, max_offset_secs * 1000, rng)
    return base + timedelta(milliseconds=offset_ms)
