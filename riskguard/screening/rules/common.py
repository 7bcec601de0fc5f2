"""Helpers shared by the policy rules."""


def format_money(value: float, currency: str) -> str:
    """Render an amount with thousands separators, e.g. "1,000,000 KZT"."""
    if float(value).is_integer():
        text = f"{value:,.0f}"
    else:
        text = f"{value:,.2f}"
    return f"{text} {currency}"
