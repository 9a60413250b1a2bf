from decimal import Decimal, ROUND_HALF_UP

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def D(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x) -> Decimal:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_money(amount, currency: str = "USD") -> str:
    """
    Storefront rendering of an order total, e.g. ``$1,250.00``.
    Unknown currencies are prefixed with their ISO code.
    """
    code = (currency or "USD").upper()
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    return f"{sign}{symbol}{abs(value):,.2f}"
