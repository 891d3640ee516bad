# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Built-in value exchanges: coerce a loosely typed scalar (for example
# one decoded from JSON, or read from a string) into a target scalar
# type. Used by auto-exchange during populate, and by the converter for
# scalar targets.


from typing import *
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from fractions import Fraction
import numbers

import numpy as np

from . import dater

S_TRUE = frozenset(['true', 't', 'yes', 'y', 'on', '1'])
S_FALSE = frozenset(['false', 'f', 'no', 'n', 'off', '0', ''])


def unwrap(val: Any) -> Any:
    "Plain Python value of a numpy scalar; other values unchanged."
    if isinstance(val, np.generic):
        return val.item()
    return val


def tobool(val: Any) -> bool:
    val = unwrap(val)
    if isinstance(val, str):
        low = val.strip().lower()
        if low in S_TRUE:
            return True
        if low in S_FALSE:
            return False
        raise ValueError(f"Not a boolean: {val!r}")
    return bool(val)


def tointeger(val: Any) -> int:
    val = unwrap(val)
    if isinstance(val, str):
        text = val.strip()
        try:
            return int(text)
        except ValueError:
            return int(float(text))
    if isinstance(val, (date, time)):
        return dater.tomillis(val)
    return int(val)


def tofloat(val: Any) -> float:
    val = unwrap(val)
    if isinstance(val, (date, time)):
        return float(dater.tomillis(val))
    return float(val)


def tocomplex(val: Any) -> complex:
    val = unwrap(val)
    if isinstance(val, str):
        return complex(val.strip())
    return complex(val)


def tostring(val: Any) -> str:
    if isinstance(val, (date, time)):
        return dater.astext(val)
    if isinstance(val, Enum):
        return val.name
    if isinstance(val, (bytes, bytearray)):
        return bytes(val).decode('utf-8')
    return str(unwrap(val))


def tobytes(val: Any) -> bytes:
    if isinstance(val, str):
        return val.encode('utf-8')
    return bytes(val)


def todecimal(val: Any) -> Decimal:
    val = unwrap(val)
    if isinstance(val, float):
        # Via text, so 0.1 stays 0.1.
        val = repr(val)
    try:
        return Decimal(val.strip() if isinstance(val, str) else val)
    except InvalidOperation as err:
        raise ValueError(f"Not a decimal: {val!r}") from err


def tofraction(val: Any) -> Fraction:
    val = unwrap(val)
    return Fraction(val.strip() if isinstance(val, str) else val)


def toenum(raw: Type[Enum], val: Any) -> Enum:
    "Enum member by member, name or value."
    if isinstance(val, raw):
        return val
    if isinstance(val, str) and val in raw.__members__:
        return raw.__members__[val]
    return raw(unwrap(val))


def todatetype(raw: type, val: Any) -> Any:
    if isinstance(val, raw):
        return val
    out = dater.todate(val)
    if issubclass(raw, datetime):
        return out
    if issubclass(raw, date):
        return out.date()
    return out.timetz()


def toboxed(raw: Type[np.generic], val: Any) -> np.generic:
    "Fixed-width numpy scalar."
    if issubclass(raw, np.bool_):
        return raw(tobool(val))
    if issubclass(raw, np.integer):
        return raw(tointeger(val))
    if issubclass(raw, np.floating):
        return raw(tofloat(val))
    if issubclass(raw, np.complexfloating):
        return raw(tocomplex(val))
    if issubclass(raw, np.str_):
        return raw(tostring(val))
    return raw(unwrap(val))


# Exact target types with a dedicated exchange.
EXCHANGES: Dict[type, Callable[[Any], Any]] = {
    bool: tobool,
    int: tointeger,
    float: tofloat,
    complex: tocomplex,
    str: tostring,
    bytes: tobytes,
    Decimal: todecimal,
    Fraction: tofraction,
}


def exchangeval(raw: Any, val: Any) -> Any:
    """
    Coerce a scalar into the target type raw. Values that already have
    exactly the target type are returned unchanged. Raises ValueError or
    TypeError if the value cannot be coerced.
    """
    if val is None or not isinstance(raw, type):
        return val

    if type(val) is raw:
        return val

    fn = EXCHANGES.get(raw)
    if fn is not None:
        return fn(val)

    if issubclass(raw, Enum):
        return toenum(raw, val)
    if issubclass(raw, np.generic):
        return toboxed(raw, val)
    if issubclass(raw, (date, time)):
        return todatetype(raw, val)
    if issubclass(raw, numbers.Integral):
        return raw(tointeger(val))
    if issubclass(raw, str):
        return raw(tostring(val))
    if isinstance(val, raw):
        return val

    return raw(val)


__all__ = [
    'EXCHANGES',
    'exchangeval',
    'tobool',
    'tobytes',
    'tocomplex',
    'todecimal',
    'tofloat',
    'tointeger',
    'tostring',
    'unwrap',
]
