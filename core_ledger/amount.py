"""
Exact Decimal Amount Module

Monetary values for balances and transfer amounts. Values are held as
Decimal, serialized as fixed-scale base-10 strings, and NEVER pass through
float. The ledger stores DECIMAL(20, 10): at most 10 integer digits and
10 fractional digits.
"""

from decimal import Decimal, InvalidOperation, Context, localcontext
from dataclasses import dataclass
from typing import Union

from .errors import InvalidArgument

LEDGER_SCALE = 10
MAX_INTEGER_DIGITS = 10

_QUANTUM = Decimal(1).scaleb(-LEDGER_SCALE)

# Wide enough that add/subtract of two in-range values is always exact
_EXACT_CONTEXT = Context(prec=40)


AmountInput = Union[str, int, Decimal, "Amount"]


@dataclass(frozen=True, order=True)
class Amount:
    """
    Immutable exact decimal amount.

    Comparison and hashing go straight to the underlying Decimal, so
    Amount("1.5") == Amount("1.5000000000").
    """
    value: Decimal

    def __post_init__(self):
        if not isinstance(self.value, Decimal):
            raise TypeError("Amount value must be a Decimal")
        if not self.value.is_finite():
            raise InvalidArgument("amount must be a finite decimal number")
        # No "-0.0000000000" in storage
        if self.value.is_zero() and self.value.is_signed():
            object.__setattr__(self, 'value', abs(self.value))

    @classmethod
    def parse(cls, raw: AmountInput, field: str = "amount") -> 'Amount':
        """
        Parse a wire or storage value into an Amount.

        Accepts decimal strings, ints and Decimals. Floats are rejected
        outright since they cannot represent most decimal fractions.
        """
        if isinstance(raw, Amount):
            return raw
        if isinstance(raw, bool) or isinstance(raw, float):
            raise InvalidArgument(f"{field} must be a decimal string, not {type(raw).__name__}", field=field)

        if isinstance(raw, Decimal):
            value = raw
        elif isinstance(raw, int):
            value = Decimal(raw)
        elif isinstance(raw, str):
            text = raw.strip()
            if not text:
                raise InvalidArgument(f"{field} is required", field=field)
            try:
                value = Decimal(text)
            except InvalidOperation:
                raise InvalidArgument(f"{field} must be a valid decimal number", field=field)
        else:
            raise InvalidArgument(f"{field} must be a decimal string", field=field)

        if not value.is_finite():
            raise InvalidArgument(f"{field} must be a finite decimal number", field=field)

        # Trailing zeros beyond the ledger scale are harmless; real digits are not
        # Precision covers every input digit, so normalize never rounds
        with localcontext(Context(prec=max(len(value.as_tuple().digits), 1))):
            normalized = value.normalize() if value else Decimal(0)
        if normalized.as_tuple().exponent < -LEDGER_SCALE:
            raise InvalidArgument(
                f"{field} must have at most {LEDGER_SCALE} fractional digits", field=field
            )
        if normalized and normalized.adjusted() >= MAX_INTEGER_DIGITS:
            raise InvalidArgument(
                f"{field} must have at most {MAX_INTEGER_DIGITS} integer digits", field=field
            )

        return cls(value)

    @classmethod
    def zero(cls) -> 'Amount':
        return cls(Decimal(0))

    def __add__(self, other: 'Amount') -> 'Amount':
        if not isinstance(other, Amount):
            return NotImplemented
        with localcontext(_EXACT_CONTEXT):
            return Amount(self.value + other.value)

    def __sub__(self, other: 'Amount') -> 'Amount':
        if not isinstance(other, Amount):
            return NotImplemented
        with localcontext(_EXACT_CONTEXT):
            return Amount(self.value - other.value)

    def __neg__(self) -> 'Amount':
        return Amount(-self.value)

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def is_zero(self) -> bool:
        return self.value == 0

    def fits_ledger(self) -> bool:
        """True if the value fits the ledger's DECIMAL(20, 10) column"""
        return not self.value or self.value.adjusted() < MAX_INTEGER_DIGITS

    def to_string(self) -> str:
        """Canonical fixed-scale string, e.g. '69.5000000000'"""
        with localcontext(_EXACT_CONTEXT):
            return format(self.value.quantize(_QUANTUM), "f")

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Amount('{self.to_string()}')"
