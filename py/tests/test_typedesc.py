
# RUN: python -m unittest discover -s tests -k typedesc

import array
import collections.abc as abc
import unittest
from collections import deque
from datetime import date, datetime, time
from decimal import Decimal
from fractions import Fraction
from typing import *

import numpy as np
import numpy.typing as npt

from beanstruct import Category, UNKNOWN, classify, kindof, resolvetype
from beanstruct.kinds import isbeanclass, islist, ismap, isnode, isprimarray, isscalar
from beanstruct.typedesc import attrtype, isclassvar, isfinal

try:
    from .beans import Color, Derived, Level, User
except ImportError:
    from beans import Color, Derived, Level, User


class BigInt(int):
    pass


class TestTypeDesc(unittest.TestCase):

    def test_nested_generic(self):
        desc = resolvetype(Dict[np.int8, List[np.float32]])
        self.assertIs(dict, desc.raw)
        self.assertTrue(desc.ispair())
        self.assertIs(np.int8, desc.next().raw)
        self.assertIs(list, desc.nextpairtype().raw)
        self.assertIs(np.float32, desc.next(1).next().raw)
        self.assertEqual(desc.next(1), desc.nextpairtype())

    def test_builtin_generic(self):
        desc = resolvetype(dict[str, list[int]])
        self.assertIs(dict, desc.raw)
        self.assertIs(str, desc.next(0).raw)
        self.assertIs(int, desc.nextpairtype().next().raw)

    def test_bare_container(self):
        desc = resolvetype(list)
        self.assertIs(list, desc.raw)
        self.assertEqual((), desc.args)
        self.assertFalse(desc.ispair())
        self.assertIs(UNKNOWN, desc.next())
        self.assertTrue(desc.next().isunknown())
        self.assertIs(list, resolvetype(List).raw)

    def test_next_beyond(self):
        desc = resolvetype(List[int])
        self.assertIs(int, desc.next(0).raw)
        self.assertIs(UNKNOWN, desc.next(1))
        self.assertIs(UNKNOWN, desc.next(-1))

    def test_optional_and_wrappers(self):
        self.assertEqual(resolvetype(int), resolvetype(Optional[int]))
        self.assertEqual(resolvetype(int), resolvetype(int | None))
        self.assertEqual(resolvetype(int), resolvetype(ClassVar[int]))
        self.assertEqual(resolvetype(int), resolvetype(Final[int]))
        self.assertEqual(resolvetype(int), resolvetype(Annotated[int, 'meta']))
        self.assertIs(str, resolvetype(Literal['a', 'b']).raw)

    def test_unknown(self):
        self.assertIs(UNKNOWN, resolvetype(Any))
        self.assertIs(UNKNOWN, resolvetype(Union[int, str]))
        self.assertIs(UNKNOWN, resolvetype(TypeVar('T')))
        self.assertIs(UNKNOWN, resolvetype('Missing'))
        self.assertTrue(resolvetype(List[Any]).next().isunknown())

    def test_tuple(self):
        desc = resolvetype(Tuple[int, ...])
        self.assertIs(tuple, desc.raw)
        self.assertEqual(1, len(desc.args))
        self.assertIs(int, desc.next().raw)

        desc = resolvetype(Tuple[int, str])
        self.assertTrue(desc.ispair())
        self.assertIs(str, desc.next(1).raw)

    def test_abc_and_callable(self):
        desc = resolvetype(Sequence[int])
        self.assertEqual(Category.COLLECTION, desc.kind())
        self.assertIs(int, desc.next().raw)

        desc = resolvetype(Callable[[int], str])
        self.assertEqual((), desc.args)

    def test_ndarray(self):
        desc = resolvetype(npt.NDArray[np.float64])
        self.assertIs(np.ndarray, desc.raw)
        self.assertIs(np.float64, desc.next().raw)
        self.assertEqual(Category.ARRAY, desc.kind())

    def test_cached(self):
        self.assertIs(resolvetype(Dict[str, int]), resolvetype(Dict[str, int]))
        self.assertIs(resolvetype(User), resolvetype(resolvetype(User)))

    def test_str(self):
        self.assertEqual('dict[str, list[int]]', str(resolvetype(Dict[str, List[int]])))

    def test_attrtype(self):
        desc = attrtype(User, 'testmap')
        self.assertIs(dict, desc.raw)
        self.assertIs(np.int8, desc.next().raw)
        self.assertTrue(attrtype(User, 'nope').isunknown())

    def test_hint_flags(self):
        self.assertTrue(isclassvar(ClassVar[str]))
        self.assertTrue(isclassvar(ClassVar))
        self.assertFalse(isclassvar(str))
        self.assertTrue(isfinal(Final[int]))
        self.assertFalse(isfinal(Optional[int]))


class TestKinds(unittest.TestCase):

    def test_classify(self):
        self.assertEqual(Category.NULL, classify(None))
        self.assertEqual(Category.PRIMITIVE, classify(True))
        self.assertEqual(Category.PRIMITIVE, classify(1))
        self.assertEqual(Category.PRIMITIVE, classify(1.5))
        self.assertEqual(Category.PRIMITIVE, classify(1j))
        self.assertEqual(Category.BOXED_PRIMITIVE, classify(np.int8(1)))
        self.assertEqual(Category.BOXED_PRIMITIVE, classify(np.float32(1.5)))
        self.assertEqual(Category.BOXED_PRIMITIVE, classify(np.bool_(True)))
        self.assertEqual(Category.STRING, classify('a'))
        self.assertEqual(Category.DATE, classify(datetime.now()))
        self.assertEqual(Category.DATE, classify(date.today()))
        self.assertEqual(Category.DATE, classify(time()))
        self.assertEqual(Category.BIG_INTEGER, classify(BigInt(5)))
        self.assertEqual(Category.BIG_DECIMAL, classify(Decimal('1.5')))
        self.assertEqual(Category.BIG_DECIMAL, classify(Fraction(1, 3)))
        self.assertEqual(Category.ENUM, classify(Color.RED))
        self.assertEqual(Category.ENUM, classify(Level.LOW))
        self.assertEqual(Category.ARRAY, classify((1, 2)))
        self.assertEqual(Category.ARRAY, classify(np.zeros(3)))
        self.assertEqual(Category.ARRAY, classify(b'ab'))
        self.assertEqual(Category.ARRAY, classify(array.array('i', [1])))
        self.assertEqual(Category.COLLECTION, classify([1]))
        self.assertEqual(Category.COLLECTION, classify({1}))
        self.assertEqual(Category.COLLECTION, classify(deque()))
        self.assertEqual(Category.KEYED_MAPPING, classify({}))
        self.assertEqual(Category.BEAN, classify(User()))
        self.assertEqual(Category.BEAN, classify(object()))

    def test_kindof(self):
        self.assertEqual(Category.NULL, kindof(None))
        self.assertEqual(Category.PRIMITIVE, kindof(int))
        self.assertEqual(Category.BOXED_PRIMITIVE, kindof(np.int8))
        self.assertEqual(Category.STRING, kindof(str))
        self.assertEqual(Category.DATE, kindof(datetime))
        self.assertEqual(Category.BIG_INTEGER, kindof(BigInt))
        self.assertEqual(Category.BIG_DECIMAL, kindof(Decimal))
        self.assertEqual(Category.ENUM, kindof(Level))
        self.assertEqual(Category.ARRAY, kindof(tuple))
        self.assertEqual(Category.COLLECTION, kindof(list))
        self.assertEqual(Category.COLLECTION, kindof(abc.Iterable))
        self.assertEqual(Category.KEYED_MAPPING, kindof(resolvetype(Dict[str, int])))
        self.assertEqual(Category.BEAN, kindof(User))
        self.assertEqual(classify(User()), kindof(User))

    def test_predicates(self):
        self.assertTrue(isnode({}))
        self.assertTrue(isnode([]))
        self.assertTrue(isnode((1,)))
        self.assertFalse(isnode(b'ab'))
        self.assertFalse(isnode('a'))
        self.assertTrue(ismap({}))
        self.assertFalse(ismap([]))
        self.assertTrue(islist((1,)))
        self.assertTrue(islist(deque()))
        self.assertFalse(islist({1}))
        self.assertTrue(isprimarray(np.zeros(2)))
        self.assertFalse(isprimarray(np.array([None, 'a'], dtype=object)))
        self.assertFalse(isprimarray((1, 2)))
        self.assertTrue(isscalar(Color.RED))
        self.assertFalse(isscalar(None))
        self.assertFalse(isscalar([]))
        self.assertTrue(isbeanclass(User))
        self.assertTrue(isbeanclass(Derived))
        self.assertFalse(isbeanclass(dict))

    def test_category_text(self):
        self.assertEqual('map', str(Category.KEYED_MAPPING))
        self.assertEqual(12, len(Category))


if __name__ == "__main__":
    unittest.main()
