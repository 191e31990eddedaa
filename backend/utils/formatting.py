from decimal import Decimal

from utils.money import to_paise

def format_indian_currency(amount: Decimal) -> str:
    """Render an amount with Indian digit grouping, e.g. ₹ 12,34,567.50. Negatives are bracketed."""
    if amount is None:
        return "₹ 0.00"
    amount = Decimal(amount)
    negative = amount < 0
    amount_str = f"{abs(amount):.2f}"
    integer_part, decimal_part = amount_str.split(".")

    if len(integer_part) > 3:
        last_three = integer_part[-3:]
        remaining = integer_part[:-3]
        groups = []
        while len(remaining) > 2:
            groups.insert(0, remaining[-2:])
            remaining = remaining[:-2]
        if remaining:
            groups.insert(0, remaining)
        integer_part = ",".join(groups + [last_three])

    formatted = f"₹ {integer_part}.{decimal_part}"
    return f"({formatted})" if negative else formatted


_UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
          "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen",
          "Eighteen", "Nineteen"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _convert(num: int) -> str:
    if num < 20:
        return _UNITS[num]
    if num < 100:
        return _TENS[num // 10] + (" " + _UNITS[num % 10] if num % 10 else "")
    if num < 1000:
        return _UNITS[num // 100] + " Hundred" + (" " + _convert(num % 100) if num % 100 else "")
    if num < 100000:
        return _convert(num // 1000) + " Thousand" + (" " + _convert(num % 1000) if num % 1000 else "")
    if num < 10000000:
        return _convert(num // 100000) + " Lakh" + (" " + _convert(num % 100000) if num % 100000 else "")
    return _convert(num // 10000000) + " Crore" + (" " + _convert(num % 10000000) if num % 10000000 else "")


def amount_to_words(amount: Decimal) -> str:
    """Spell an amount the way vouchers print it: 'Rupees One Lakh Five Hundred and Fifty Paise Only'."""
    if amount is None:
        return ""
    paise = to_paise(amount)
    if paise < 0:
        return "Minus " + amount_to_words(-Decimal(amount))
    rupees, paise = divmod(paise, 100)

    words = "Rupees " + (_convert(rupees) if rupees else "Zero")
    if paise:
        words += " and " + _convert(paise) + " Paise"
    return words + " Only"
