"""Exceptions raised by the rate and settlement services."""


class SplitterError(Exception):
    pass


class DecodeError(SplitterError):
    """The calculate request could not be parsed."""


class RateError(SplitterError):
    pass


class NetworkError(RateError):
    pass


class ParseError(RateError):
    pass


class MissingRateError(SplitterError):
    """A bill uses a currency the rate table has no usable rate for."""

    def __init__(self, currency: str, rate_date: str = ""):
        self.currency = currency.upper()
        self.rate_date = rate_date
        super().__init__(f"missing exchange rate for currency {self.currency}")


class AmountError(SplitterError):
    """A bill's amount cannot be expressed as a finite base-currency value."""

    def __init__(self, bill_id: int):
        self.bill_id = bill_id
        super().__init__(f"amount of bill {bill_id} is out of range after conversion")
