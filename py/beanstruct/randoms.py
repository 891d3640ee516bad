# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Random values of any declared type, for test fixtures. Containers
# are filled with a few random elements; nested beans are populated
# recursively down to a fixed depth, below which they are None.


from typing import *
import inspect
import logging
import random

import numpy as np

from . import reflecter
from . import resolves
from .exchanges import todatetype
from .kinds import Category, kindof


logger = logging.getLogger(__name__)

# Random dates fall between 1970 and 2100.
MAX_MILLIS = 4102444800000


class Randoms:
    """
    Random value generator. A seed makes the generated values repeatable.
    """
    def __init__(self, seed: Any = None, depth: int = 3, size: int = 3) -> None:
        self.random = random.Random(seed)
        self.depth = depth      # Nesting depth of generated beans and containers.
        self.size = size        # Number of elements of generated containers.

    def get(self, cls: type) -> Any:
        "Instance of cls with every writable attribute randomly populated."
        return self._bean(cls, self.depth)

    def text(self) -> str:
        return '%036x' % self.random.getrandbits(144)

    def generate(self, target: Any, depth: Optional[int] = None) -> Any:
        "Random value of a TypeDesc, AttrDesc or type hint."
        depth = self.depth if depth is None else depth
        desc = resolves.astypedesc(target)
        if desc.isunknown():
            return self.text()

        raw = desc.raw
        kind = kindof(desc)
        rnd = self.random

        if Category.NULL == kind:
            return None

        if Category.PRIMITIVE == kind:
            if raw is bool:
                return rnd.random() < 0.5
            if raw is int:
                return rnd.randint(-2**31, 2**31 - 1)
            if raw is float:
                return rnd.random()
            return complex(rnd.random(), rnd.random())

        if Category.BOXED_PRIMITIVE == kind:
            return self._boxed(raw)

        if Category.STRING == kind:
            return raw(self.text())

        if Category.DATE == kind:
            return todatetype(raw, rnd.randint(0, MAX_MILLIS))

        if Category.BIG_INTEGER == kind:
            return (int if inspect.isabstract(raw) else raw)(rnd.randint(-2**63, 2**63 - 1))

        if Category.BIG_DECIMAL == kind:
            return raw(str(rnd.randint(0, 10**6))) / raw(100)

        if Category.ENUM == kind:
            members = list(raw)
            return rnd.choice(members) if members else None

        if Category.ARRAY == kind or Category.COLLECTION == kind:
            return resolves.resolve(desc, self._items(desc, depth))

        if Category.KEYED_MAPPING == kind:
            keydesc, valdesc = desc.next(0), desc.nextpairtype()
            return resolves.resolve(desc, dict(
                (self.generate(keydesc, depth - 1), self.generate(valdesc, depth - 1))
                for _ in range(self.size if 0 < depth else 0)))

        if depth <= 0 or inspect.isabstract(raw):
            return None
        return self._bean(raw, depth)

    def _boxed(self, raw: type) -> Any:
        rnd = self.random
        if issubclass(raw, np.bool_):
            return raw(rnd.random() < 0.5)
        if issubclass(raw, np.integer):
            info = np.iinfo(raw)
            return raw(rnd.randint(int(info.min), int(info.max)))
        if issubclass(raw, np.floating):
            return raw(rnd.random())
        if issubclass(raw, np.complexfloating):
            return raw(complex(rnd.random(), rnd.random()))
        if issubclass(raw, np.str_):
            return raw(self.text())
        return raw(0)

    def _items(self, desc: Any, depth: int) -> List[Any]:
        count = self.size if 0 < depth else 0
        if issubclass(desc.raw, tuple) and 1 < len(desc.args):
            return [self.generate(a, depth - 1) for a in desc.args]
        elem = desc.next()
        if elem.isunknown():
            # Element type erased: small integers fit every array kind.
            return [self.random.randint(0, 255) for _ in range(count)]
        return [self.generate(elem, depth - 1) for _ in range(count)]

    def _bean(self, cls: type, depth: int) -> Any:
        refl = reflecter.Reflecter(reflecter.instantiate(cls))
        for attr in refl.fields():
            if attr.isstatic or attr.isfinal or not attr.isaccessible:
                continue
            try:
                refl.setval(attr.name, self.generate(attr, depth - 1))
            except Exception as err:
                logger.error('random value for %s failed: %s', attr.qualname, err)
        return refl.get()


DEFAULT = Randoms()


def generate(target: Any) -> Any:
    "Random value of a TypeDesc, AttrDesc or type hint."
    return DEFAULT.generate(target)


def get(cls: type) -> Any:
    "Randomly populated instance of cls."
    return DEFAULT.get(cls)


__all__ = [
    'DEFAULT',
    'Randoms',
    'generate',
    'get',
]
