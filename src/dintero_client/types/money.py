"""
Currency and amounts in minor units.
"""

from enum import Enum
from typing import Union

from pydantic import RootModel


class Currency(str, Enum):
    """ISO 4217 currencies supported by Dintero."""
    NOK = "NOK"
    SEK = "SEK"
    DKK = "DKK"
    EUR = "EUR"
    USD = "USD"

    @property
    def code(self) -> str:
        return self.value

    @property
    def minor_units(self) -> int:
        """Number of decimal digits of the minor unit."""
        return 2


class Money(RootModel[int]):
    """
    Amount in minor units (øre, cent).

    Serialized as a bare integer, the way Dintero sends amounts.

    Examples:
        >>> Money.from_major(100, Currency.NOK).amount
        10000
        >>> Money(12345).to_major(Currency.NOK)
        123.45
    """

    root: int

    @property
    def amount(self) -> int:
        return self.root

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def from_major(cls, major: int, currency: Union[Currency, str] = Currency.NOK) -> "Money":
        """Amount from whole currency units."""
        return cls(major * 10 ** Currency(currency).minor_units)

    def to_major(self, currency: Union[Currency, str] = Currency.NOK) -> float:
        """Amount in whole currency units."""
        return self.root / 10 ** Currency(currency).minor_units

    def is_zero(self) -> bool:
        return self.root == 0

    def is_positive(self) -> bool:
        return self.root > 0

    def is_negative(self) -> bool:
        return self.root < 0

    def __int__(self) -> int:
        return self.root

    def __lt__(self, other: "Money") -> bool:
        return self.root < other.root

    def __hash__(self) -> int:
        return hash(self.root)
