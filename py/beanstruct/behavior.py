# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Value behaviors
# ===============
#
# A ValueBehavior classifies a value once and calls exactly one handler,
# chosen from a table with an entry for every Category. Subclasses give
# the handlers; the scalar, sequence and mapping groups share defaults.
#
# Concrete behaviors:
# - stringify: canonical text of any value.
# - hashof: hash consistent with isequal.
# - isequal: deep structural equality.
#
# NOTE: cyclic structures do not terminate.


from typing import *
from collections.abc import Set
import logging

import numpy as np

from . import reflecter
from .dater import astext
from .kinds import Category, classify


logger = logging.getLogger(__name__)

NULL_STR = '<null>'

# Java-style 32 bit hash accumulation.
HASH_MASK = 0xFFFFFFFF
HASH_PRIME = 31

# No equal member found.
_NOMATCH = object()


def elementsof(val: Any) -> List[Any]:
    "Elements of an array or sequence, as plain Python values for numeric arrays."
    if isinstance(val, (np.ndarray, memoryview)):
        return val.tolist()
    return list(val)


def _fieldsof(val: Any, rules: Optional['reflecter.Rules'] = None) -> List[Tuple[str, Any]]:
    refl = reflecter.Reflecter(val, rules)
    return [(attr.name, refl.val(attr.name)) for attr in refl.fields()
            if not attr.isstatic and not attr.isfinal]


class ValueBehavior:
    """
    Category dispatch skeleton. detect(val, *args) calls the handler for
    the category of val with (val, *args).
    """

    def __init__(self, rules: Optional['reflecter.Rules'] = None) -> None:
        self.rules = rules
        self.handlers: Dict[Category, Callable[..., Any]] = {
            Category.NULL: self.onnull,
            Category.PRIMITIVE: self.onprimitive,
            Category.BOXED_PRIMITIVE: self.onboxed,
            Category.STRING: self.onstring,
            Category.DATE: self.ondate,
            Category.BIG_INTEGER: self.onbiginteger,
            Category.BIG_DECIMAL: self.onbigdecimal,
            Category.ENUM: self.onenum,
            Category.ARRAY: self.onarray,
            Category.COLLECTION: self.oncollection,
            Category.KEYED_MAPPING: self.onmap,
            Category.BEAN: self.onbean,
        }

    def detect(self, val: Any, *args: Any) -> Any:
        return self.handlers[classify(val)](val, *args)

    def isexcluded(self, val: Any) -> bool:
        "Bean is kept as an object reference, not introspected."
        rules = reflecter.Rules() if self.rules is None else self.rules
        return rules.isexcluded(val)

    def onnull(self, val: Any, *args: Any) -> Any:
        raise NotImplementedError(type(self).__name__ + '.onnull')

    def onscalar(self, val: Any, *args: Any) -> Any:
        raise NotImplementedError(type(self).__name__ + '.onscalar')

    def onprimitive(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def onboxed(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def onstring(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def ondate(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def onbiginteger(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def onbigdecimal(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def onenum(self, val: Any, *args: Any) -> Any:
        return self.onscalar(val, *args)

    def onsequence(self, val: Any, *args: Any) -> Any:
        raise NotImplementedError(type(self).__name__ + '.onsequence')

    def onarray(self, val: Any, *args: Any) -> Any:
        return self.onsequence(val, *args)

    def oncollection(self, val: Any, *args: Any) -> Any:
        return self.onsequence(val, *args)

    def onmap(self, val: Any, *args: Any) -> Any:
        raise NotImplementedError(type(self).__name__ + '.onmap')

    def onbean(self, val: Any, *args: Any) -> Any:
        raise NotImplementedError(type(self).__name__ + '.onbean')


class StringBehavior(ValueBehavior):
    "Canonical text of a value."

    def onnull(self, val: Any) -> str:
        return NULL_STR

    def onscalar(self, val: Any) -> str:
        return str(val)

    def ondate(self, val: Any) -> str:
        return astext(val)

    def onenum(self, val: Any) -> str:
        return val.name

    def onsequence(self, val: Any) -> str:
        return '[' + ', '.join(self.detect(v) for v in elementsof(val)) + ']'

    def oncollection(self, val: Any) -> str:
        if isinstance(val, Set):
            return '{' + ', '.join(self.detect(v) for v in val) + '}'
        return self.onsequence(val)

    def onmap(self, val: Any) -> str:
        return '{' + ', '.join(
            self.detect(k) + '=' + self.detect(v) for k, v in val.items()) + '}'

    def onbean(self, val: Any) -> str:
        if self.isexcluded(val):
            return str(val)
        return type(val).__qualname__ + '{' + ', '.join(
            name + '=' + self.detect(v) for name, v in _fieldsof(val, self.rules)) + '}'


class HashBehavior(ValueBehavior):
    """
    Hash consistent with EqualBehavior. Sequences combine in order; sets
    and mapping values are summed, so iteration order does not matter.
    """

    def onnull(self, val: Any) -> int:
        return 0

    def onscalar(self, val: Any) -> int:
        return hash(val) & HASH_MASK

    def onsequence(self, val: Any) -> int:
        h = 1
        for v in elementsof(val):
            h = (HASH_PRIME * h + self.detect(v)) & HASH_MASK
        return h

    def oncollection(self, val: Any) -> int:
        if isinstance(val, Set):
            return sum(self.detect(v) for v in val) & HASH_MASK
        return self.onsequence(val)

    def onmap(self, val: Any) -> int:
        return sum(self.detect(v) for v in val.values()) & HASH_MASK

    def onbean(self, val: Any) -> int:
        if self.isexcluded(val):
            return hash(val) & HASH_MASK
        return self.onmap(reflecter.Reflecter(val, self.rules).asmap())


class EqualBehavior(ValueBehavior):
    """
    Deep equality. Values of different exact types are never equal.
    Reasons for inequality are logged at DEBUG. Set members and mapping
    keys are matched by structural hash, then by isequal.
    """

    def __init__(self, rules: Optional['reflecter.Rules'] = None) -> None:
        super().__init__(rules)
        self.hasher = HashBehavior(rules)

    def isequal(self, a: Any, b: Any) -> bool:
        if a is b:
            return True
        if a is None or b is None:
            logger.debug('not equal: %s is None', 'first' if a is None else 'second')
            return False
        if type(a) is not type(b):
            logger.debug('not equal: type %s differs from %s',
                         type(a).__qualname__, type(b).__qualname__)
            return False
        return self.detect(a, b)

    def onnull(self, a: Any, b: Any) -> bool:
        return b is None

    def onscalar(self, a: Any, b: Any) -> bool:
        out = bool(a == b)
        if not out:
            logger.debug('not equal: %r != %r', a, b)
        return out

    def onenum(self, a: Any, b: Any) -> bool:
        return a is b

    def onsequence(self, a: Any, b: Any) -> bool:
        la, lb = elementsof(a), elementsof(b)
        if len(la) != len(lb):
            logger.debug('not equal: length %d differs from %d', len(la), len(lb))
            return False
        for i, (x, y) in enumerate(zip(la, lb)):
            if not self.isequal(x, y):
                logger.debug('not equal: element %d differs', i)
                return False
        return True

    def oncollection(self, a: Any, b: Any) -> bool:
        if not isinstance(a, Set):
            return self.onsequence(a, b)
        if len(a) != len(b):
            logger.debug('not equal: size %d differs from %d', len(a), len(b))
            return False
        buckets = self.buckets(b)
        for v in a:
            if self.take(buckets, v) is _NOMATCH:
                logger.debug('not equal: %r is missing', v)
                return False
        return True

    def onmap(self, a: Any, b: Any) -> bool:
        if len(a) != len(b):
            logger.debug('not equal: size %d differs from %d', len(a), len(b))
            return False
        buckets = self.buckets(b.keys())
        for k, v in a.items():
            bk = self.take(buckets, k)
            if bk is _NOMATCH:
                logger.debug('not equal: key %r is missing', k)
                return False
            if not self.isequal(v, b[bk]):
                logger.debug('not equal: value of key %r differs', k)
                return False
        return True

    def buckets(self, vals: Iterable[Any]) -> Dict[int, List[Any]]:
        "Values grouped by structural hash."
        out: Dict[int, List[Any]] = {}
        for v in vals:
            out.setdefault(self.hasher.detect(v), []).append(v)
        return out

    def take(self, buckets: Dict[int, List[Any]], val: Any) -> Any:
        "Remove and return the bucketed value equal to val, or _NOMATCH."
        bucket = buckets.get(self.hasher.detect(val), [])
        for i, other in enumerate(bucket):
            if self.isequal(val, other):
                return bucket.pop(i)
        return _NOMATCH

    def onbean(self, a: Any, b: Any) -> bool:
        if self.isexcluded(a):
            return bool(a == b)
        return self.isequal(reflecter.Reflecter(a, self.rules).asmap(),
                            reflecter.Reflecter(b, self.rules).asmap())


_STRING = StringBehavior()
_HASH = HashBehavior()
_EQUAL = EqualBehavior()


def stringify(val: Any = None) -> str:
    "Canonical text of a value."
    return _STRING.detect(val)


def hashof(val: Any = None) -> int:
    "Structural hash of a value."
    return _HASH.detect(val)


def isequal(a: Any = None, b: Any = None) -> bool:
    "Deep structural equality."
    return _EQUAL.isequal(a, b)


__all__ = [
    'EqualBehavior',
    'HashBehavior',
    'NULL_STR',
    'StringBehavior',
    'ValueBehavior',
    'elementsof',
    'hashof',
    'isequal',
    'stringify',
]
