# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Shape categories
# ================
#
# Every runtime value, and every resolved type, maps to exactly one
# Category. This module is the single place where shape is decided;
# the accessor, navigator, converter and behaviors all consult it.
#
# Precedence (load-bearing, applied in this order):
#   null, primitive, boxed primitive, string, date, big integer,
#   big decimal, enum, array, collection, keyed mapping, bean.
#
# Enum members never match the earlier numeric or string checks, even
# when the enum mixes in int or str.


from typing import *
from collections import deque
from collections.abc import Collection, Iterable, Mapping
from decimal import Decimal
from enum import Enum
from fractions import Fraction
import array
import datetime
import numbers

import numpy as np

from . import typedesc


class Category(str, Enum):
    NULL = 'null'
    PRIMITIVE = 'primitive'
    BOXED_PRIMITIVE = 'boxed'
    STRING = 'string'
    DATE = 'date'
    BIG_INTEGER = 'biginteger'
    BIG_DECIMAL = 'bigdecimal'
    ENUM = 'enum'
    ARRAY = 'array'
    COLLECTION = 'collection'
    KEYED_MAPPING = 'map'
    BEAN = 'bean'

    def __str__(self) -> str:
        return self.value


PRIMITIVE_TYPES = (bool, int, float, complex)
DATE_TYPES = (datetime.date, datetime.time)
DECIMAL_TYPES = (Decimal, Fraction)
PRIMARRAY_TYPES = (array.array, bytes, bytearray, memoryview)
ARRAY_TYPES = (tuple, np.ndarray) + PRIMARRAY_TYPES

# Categories holding a single value rather than a structure.
SCALARS = frozenset([
    Category.PRIMITIVE,
    Category.BOXED_PRIMITIVE,
    Category.STRING,
    Category.DATE,
    Category.BIG_INTEGER,
    Category.BIG_DECIMAL,
    Category.ENUM,
])


def classify(val: Any = None) -> Category:
    "Shape category of a runtime value."
    if val is None:
        return Category.NULL

    isenum = isinstance(val, Enum)

    if not isenum and type(val) in PRIMITIVE_TYPES:
        return Category.PRIMITIVE
    if isinstance(val, np.generic):
        return Category.BOXED_PRIMITIVE
    if not isenum and isinstance(val, str):
        return Category.STRING
    if isinstance(val, DATE_TYPES):
        return Category.DATE
    if not isenum and isinstance(val, numbers.Integral):
        return Category.BIG_INTEGER
    if isinstance(val, DECIMAL_TYPES):
        return Category.BIG_DECIMAL
    if isenum:
        return Category.ENUM
    if isinstance(val, ARRAY_TYPES):
        return Category.ARRAY
    if isinstance(val, Mapping):
        return Category.KEYED_MAPPING
    if isinstance(val, Collection):
        return Category.COLLECTION

    return Category.BEAN


def kindof(target: Any = None) -> Category:
    """
    Shape category of a type: a TypeDesc, a class, or None (NoneType).
    Unknown types (typing.Any) fall through to BEAN, so callers that care
    should check TypeDesc.isunknown() first.
    """
    raw = target.raw if isinstance(target, typedesc.TypeDesc) else target

    if raw is None or raw is type(None):
        return Category.NULL
    if not isinstance(raw, type):
        return Category.BEAN

    isenum = issubclass(raw, Enum)

    if not isenum and raw in PRIMITIVE_TYPES:
        return Category.PRIMITIVE
    if issubclass(raw, np.generic):
        return Category.BOXED_PRIMITIVE
    if not isenum and issubclass(raw, str):
        return Category.STRING
    if issubclass(raw, DATE_TYPES):
        return Category.DATE
    if not isenum and issubclass(raw, numbers.Integral):
        return Category.BIG_INTEGER
    if issubclass(raw, DECIMAL_TYPES):
        return Category.BIG_DECIMAL
    if isenum:
        return Category.ENUM
    if issubclass(raw, ARRAY_TYPES):
        return Category.ARRAY
    if issubclass(raw, Mapping):
        return Category.KEYED_MAPPING
    if issubclass(raw, Collection) or raw is Iterable:
        return Category.COLLECTION

    return Category.BEAN


def isscalar(val: Any = None) -> bool:
    "Value is a single scalar (not null, not a structure)."
    return classify(val) in SCALARS


def isprimarray(val: Any = None) -> bool:
    "Value is an array of primitive elements."
    if isinstance(val, np.ndarray):
        return val.dtype != object
    return isinstance(val, PRIMARRAY_TYPES)


def isnode(val: Any = None) -> bool:
    "Value is a node - defined, and a keyed mapping or a list-like structure."
    return classify(val) in (Category.KEYED_MAPPING, Category.COLLECTION, Category.ARRAY) \
        and not isprimarray(val)


def ismap(val: Any = None) -> bool:
    "Value is a keyed mapping."
    return isinstance(val, Mapping)


def islist(val: Any = None) -> bool:
    "Value is an indexable sequence of elements (list, deque or tuple)."
    return isinstance(val, (list, tuple, deque))


def isbeanclass(cls: Any = None) -> bool:
    "Class instances classify as beans."
    return isinstance(cls, type) and Category.BEAN == kindof(cls)


__all__ = [
    'Category',
    'SCALARS',
    'classify',
    'isbeanclass',
    'islist',
    'ismap',
    'isnode',
    'isprimarray',
    'isscalar',
    'kindof',
]
