from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value, places: int = 0):
    """
    Round like a cashier: halves go away from zero.

    The builtin round() uses banker's rounding on binary floats, which turns
    1.365 into 1.36 and 2.5 into 2. Prices and multipliers are rounded here
    instead.

    Returns:
        int when places == 0, float otherwise
    """
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)
