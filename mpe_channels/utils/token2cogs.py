""" Safe conversion between token(string) and cogs(int) """
import decimal

from mpe_channels.errors import InvalidAmount

TOKEN_DECIMALS = 18


def strtoken2cogs(str_token):
    if type(str_token) != str:
        raise InvalidAmount(str_token, "parameter should be string")

    # in case user write something stupid we set very big precision
    decimal.getcontext().prec = 1000
    try:
        cogs_decimal = decimal.Decimal(str_token) * 10 ** TOKEN_DECIMALS
    except decimal.InvalidOperation:
        raise InvalidAmount(str_token, "not a number")
    if not cogs_decimal.is_finite():
        raise InvalidAmount(str_token, "not a number")
    cogs_int = int(cogs_decimal)
    if cogs_int != cogs_decimal:
        raise InvalidAmount(str_token, "token has only %i decimals" % TOKEN_DECIMALS)
    if cogs_int < 0:
        raise InvalidAmount(str_token, "amount should not be negative")
    return cogs_int


def cogs2strtoken(cogs_int):
    # presicison should be higer then INITIAL_SUPPLY + 1, we set it to 1000 be consistent with strtoken2cogs
    decimal.getcontext().prec = 1000
    token_decimal = decimal.Decimal(cogs_int) / 10 ** TOKEN_DECIMALS
    return format(token_decimal, 'f')


def to_cogs(amount):
    """
    Canonical integer amount in cogs.
    >>> to_cogs(10)
    10
    >>> to_cogs("42")
    42
    >>> to_cogs(decimal.Decimal("7.000"))
    7
    """
    if isinstance(amount, bool):
        raise InvalidAmount(amount, "boolean is not an amount")
    if isinstance(amount, int):
        cogs = amount
    elif isinstance(amount, (str, float, decimal.Decimal)):
        try:
            amount_decimal = decimal.Decimal(amount)
        except decimal.InvalidOperation:
            raise InvalidAmount(amount, "not a number")
        if not amount_decimal.is_finite() or amount_decimal != amount_decimal.to_integral_value():
            raise InvalidAmount(amount, "fractional cogs are not allowed")
        cogs = int(amount_decimal)
    else:
        raise InvalidAmount(amount, "unsupported type %s" % type(amount).__name__)
    if cogs < 0:
        raise InvalidAmount(amount, "amount should not be negative")
    return cogs


def to_cogs_str(amount):
    return str(to_cogs(amount))
