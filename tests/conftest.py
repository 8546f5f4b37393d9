"""Shared fixtures for fluentmask tests."""

from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import NamedTuple, Optional

import pytest
from pydantic import BaseModel

from fluentmask import AbstractMasker
from fluentmask.core.config import MaskingConfig, set_default_config
from fluentmask.rules import KeepLastRule, MaskEndRule, MaskStartRule


@dataclass
class Person:
    name: str
    email: str
    phone: Optional[str] = None
    age: int = 0


@dataclass
class Address:
    street: str
    city: str
    zip_code: str


@dataclass
class Customer:
    id: int
    name: str
    email: str
    card: str
    salary: Decimal
    birthday: date
    created_at: datetime
    address: Optional[Address] = None
    tags: list[str] = field(default_factory=list)


@dataclass
class Order:
    number: str
    customer: Optional[Customer]
    addresses: list[Address] = field(default_factory=list)


@dataclass(frozen=True)
class FrozenPoint:
    x: int
    y: int


class Account(BaseModel):
    owner: str
    iban: str
    balance: float = 0.0


class Coordinates(NamedTuple):
    lat: float
    lon: float


class PersonMasker(AbstractMasker[Person]):
    """Masker used by most registry tests."""

    def __init__(self) -> None:
        super().__init__(config=MaskingConfig())
        self.mask_for("email", lambda b: b.email_mask())
        self.mask_for(lambda p: p.phone, lambda b: b.phone_mask(keep_last=2))


class AddressMasker(AbstractMasker[Address]):
    def __init__(self) -> None:
        super().__init__(config=MaskingConfig())
        self.mask_for("street", lambda b: b.redact("[STREET]"))
        self.mask_for("zip_code", MaskEndRule(3))


@pytest.fixture(autouse=True)
def isolated_default_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep FLUENTMASK_* environment variables from leaking into tests."""
    for key in (
        "FLUENTMASK_DEFAULT_BEHAVIOR",
        "FLUENTMASK_REGEX_TIMEOUT_MS",
        "FLUENTMASK_OUTPUT_FORMAT",
        "FLUENTMASK_JSON_INDENT",
        "FLUENTMASK_CONVERT_TYPES",
    ):
        monkeypatch.delenv(key, raising=False)
    set_default_config(MaskingConfig())
    yield
    set_default_config(None)


@pytest.fixture
def person() -> Person:
    return Person(name="Jane Doe", email="jane.doe@example.com", phone="+45 12 34 56 78", age=34)


@pytest.fixture
def address() -> Address:
    return Address(street="1 Main Street", city="Springfield", zip_code="12345")


@pytest.fixture
def customer(address: Address) -> Customer:
    return Customer(
        id=1001,
        name="Jane Doe",
        email="jane@example.com",
        card="4111 1111 1111 1111",
        salary=Decimal("52499.50"),
        birthday=date(1990, 5, 17),
        created_at=datetime(2024, 1, 2, 3, 4, 5),
        address=address,
        tags=["vip", "newsletter"],
    )


@pytest.fixture
def person_masker() -> PersonMasker:
    return PersonMasker()


@pytest.fixture
def hello_world_chain() -> tuple:
    """Chain from the positional rule walkthrough: HelloWorld -> ******or**."""
    return (MaskStartRule(2), MaskEndRule(2), KeepLastRule(4))


@pytest.fixture
def profile_yaml(tmp_path: Path) -> Path:
    """A valid customer profile on disk."""
    path = tmp_path / "customer.yaml"
    path.write_text(
        """
version: "1.0"
name: customer
behavior: include
properties:
  email:
    type: string
    rules:
      - email_mask: {local_keep: 1}
  card:
    rules:
      - card_mask: {keep_last: 4}
  salary:
    type: numeric
    rules:
      - round_to: 1000
  name:
    rules:
      - keep_first: 1
""",
        encoding="utf-8",
    )
    return path
