"""
Module: payroll_kernel.db.types
Responsibility: Exact-decimal column types and the single sanctioned rounding
    function for monetary values.  Every model and service uses these
    definitions so that precision and rounding are identical system-wide.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in the payroll kernel.  Money and hours are Decimal
      from the column to the payslip.
    - round_money() is the ONLY sanctioned rounding function.  It quantizes
      with ROUND_HALF_EVEN (banker's rounding) so that rounding drift does
      not accumulate across hundreds of payslips.

Failure modes:
    - decimal.InvalidOperation if a non-numeric string reaches to_decimal().
      Caller input goes through finite_decimal() instead.

Storage note:
    PostgreSQL stores ExactDecimal columns as NUMERIC.  SQLite has no decimal
    type (NUMERIC columns are coerced to REAL), so on SQLite the value is
    stored as its canonical decimal string and parsed back to Decimal on load.
    Aggregations are therefore computed in Python, never with SQL SUM().
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_EVEN

ZERO = Decimal("0")


class ExactDecimal(TypeDecorator):
    """
    Decimal column that never round-trips through binary floating point.

    Contract:
        Binds Python ``Decimal`` values and always loads them back as
        ``Decimal``.  On SQLite the value is stored as a string.

    Guarantees:
        - process_result_value never returns float.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = Numeric
    cache_ok = True

    def __init__(self, precision: int = 38, scale: int = 9):
        super().__init__()
        self.precision = precision
        self.scale = scale

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(64))
        return dialect.type_descriptor(
            Numeric(self.precision, self.scale, asdecimal=True)
        )

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = to_decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return to_decimal(value)


def MoneyType() -> ExactDecimal:
    """Column type for monetary amounts: 38 digits, 9 decimal places."""
    return ExactDecimal(38, 9)


def HoursType() -> ExactDecimal:
    """Column type for worked hours."""
    return ExactDecimal(9, 2)


def to_decimal(value) -> Decimal:
    """
    Coerce an int, str or Decimal to Decimal.

    Floats are converted through ``str()`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def finite_decimal(value) -> Decimal | None:
    """
    Parse caller input as a finite Decimal.

    Returns None for anything that is not a finite number: non-numeric
    strings, None, NaN and Infinity.  Validators turn None into their typed
    validation error.
    """
    try:
        number = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return number if number.is_finite() else None


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the ONLY sanctioned rounding function for monetary values.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized to ``decimal_places`` using
        ``rounding`` (ROUND_HALF_EVEN by default).
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=rounding)
