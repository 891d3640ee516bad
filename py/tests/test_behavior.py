
# RUN: python -m unittest discover -s tests -k behavior

import unittest
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import *

import numpy as np

from beanstruct import (
    Category,
    JsonValueBehavior,
    NULL_STR,
    Rules,
    ValueBehavior,
    encode,
    hashof,
    isequal,
    reflect,
    stringify,
    todate,
    tojsontree,
)
from beanstruct.behavior import EqualBehavior, StringBehavior, elementsof

try:
    from .beans import Address, Color, Level, LonLat, User
except ImportError:
    from beans import Address, Color, Level, LonLat, User


JACK = '{"birth":1425988977384,"address":{"detail":"moon","lonlat":' \
    '{"lon":0.12,"lat":0.10},"code":30},"age":18,"name":"jack"}'


@dataclass(frozen=True)
class Tag:
    name: str = ''
    note: str = field(default='', compare=False)


class Shape(ValueBehavior):
    "Names the handler group a value lands in."

    def onnull(self, val):
        return 'null'

    def onscalar(self, val):
        return 'scalar'

    def onsequence(self, val):
        return 'sequence'

    def onmap(self, val):
        return 'map'

    def onbean(self, val):
        return 'bean'


class TestValueBehavior(unittest.TestCase):

    def test_handlers(self):
        behavior = Shape()
        self.assertEqual(set(Category), set(behavior.handlers.keys()))

        self.assertEqual('null', behavior.detect(None))
        for val in [1, np.int8(1), 'a', todate(0), Decimal('1'), Color.RED, Level.LOW]:
            self.assertEqual('scalar', behavior.detect(val))
        for val in [(1,), np.zeros(2), b'a', [1], {1}]:
            self.assertEqual('sequence', behavior.detect(val))
        self.assertEqual('map', behavior.detect({}))
        self.assertEqual('bean', behavior.detect(LonLat()))

    def test_unhandled(self):
        with self.assertRaises(NotImplementedError):
            ValueBehavior().detect(1)
        with self.assertRaises(NotImplementedError):
            ValueBehavior().detect(LonLat())

    def test_elementsof(self):
        self.assertEqual([1, 2], elementsof(np.array([1, 2])))
        self.assertEqual([97], elementsof(memoryview(b'a')))
        self.assertEqual([1], elementsof((1,)))


class TestStringify(unittest.TestCase):

    def test_beans(self):
        self.assertEqual('LonLat{lon=0.12, lat=0.1}', stringify(LonLat(0.12, 0.1)))
        self.assertEqual(
            'User{name=jack, age=<null>, birth=<null>, '
            'address=Address{detail=<null>, lonlat=LonLat{lon=1.0, lat=2.0}, code=<null>}, '
            'testmap={1=[1.5]}}',
            stringify(User(name='jack', address=Address(lonlat=LonLat(1.0, 2.0)),
                           testmap={np.int8(1): [np.float32(1.5)]})))

    def test_scalars(self):
        self.assertEqual(NULL_STR, stringify(None))
        self.assertEqual('RED', stringify(Color.RED))
        self.assertEqual('1.50', stringify(Decimal('1.50')))
        self.assertEqual('3', stringify(np.int8(3)))
        self.assertEqual('2015-03-10 20:02:57', stringify(todate(1425988977384)))

    def test_structures(self):
        self.assertEqual('[1, 2]', stringify((1, 2)))
        self.assertEqual('[1, 2]', stringify(np.array([1, 2])))
        self.assertEqual('{1}', stringify({1}))
        self.assertEqual('{a=[<null>]}', stringify({'a': [None]}))

    def test_excluded(self):
        lonlat = LonLat(1.0, 2.0)
        behavior = StringBehavior(Rules(excludes=[LonLat.__module__]))
        self.assertEqual(str(lonlat), behavior.detect(lonlat))
        self.assertEqual(str(len), stringify(len))


class TestHashEqual(unittest.TestCase):

    def test_hash(self):
        self.assertEqual(0, hashof(None))
        self.assertEqual(hashof(LonLat(1.0, 2.0)), hashof(LonLat(1.0, 2.0)))
        self.assertEqual(hashof({1, 2}), hashof({2, 1}))
        self.assertEqual(hashof({'a': 1, 'b': 2}), hashof({'b': 2, 'a': 1}))
        self.assertNotEqual(hashof([1, 2]), hashof([2, 1]))
        self.assertEqual(hashof(np.array([1, 2])), hashof(np.array([1, 2])))

        for val in [-1, 2**70, 'a', [1, [2, 3]], LonLat(-1.0, 2.0)]:
            out = hashof(val)
            self.assertTrue(0 <= out <= 0xFFFFFFFF)

    def test_equal(self):
        self.assertTrue(isequal(LonLat(1.0, 2.0), LonLat(1.0, 2.0)))
        self.assertFalse(isequal(LonLat(1.0, 2.0), LonLat(1.0, 3.0)))
        self.assertTrue(isequal(np.array([1, 2]), np.array([1, 2])))
        self.assertFalse(isequal(np.array([1, 2]), np.array([1, 2, 3])))
        self.assertTrue(isequal({1, 2}, {2, 1}))
        self.assertFalse(isequal({1, 2}, {1, 3}))
        self.assertTrue(isequal(Color.RED, Color.RED))
        self.assertFalse(isequal(Color.RED, Color.GREEN))
        self.assertFalse(isequal((1,), [1]))
        self.assertFalse(isequal(LonLat(), None))

        a = reflect(User).populate(JACK).get()
        b = reflect(User).populate(JACK).get()
        self.assertTrue(isequal(a, b))
        self.assertEqual(hashof(a), hashof(b))
        b.address.lonlat.lat = 0.2
        self.assertFalse(isequal(a, b))

    def test_equal_members(self):
        # Tag's own == ignores note, structural equality does not
        self.assertFalse(isequal({Tag('a', 'x')}, {Tag('a', 'y')}))
        self.assertTrue(isequal({Tag('a', 'x'), Tag('b')}, {Tag('b'), Tag('a', 'x')}))
        self.assertFalse(isequal({1}, {1.0}))
        self.assertFalse(isequal(frozenset([True]), frozenset([1])))

        self.assertFalse(isequal({1: 'a'}, {1.0: 'a'}))
        self.assertFalse(isequal({Tag('a', 'x'): 1}, {Tag('a', 'y'): 1}))
        self.assertTrue(isequal({Tag('a', 'x'): 1}, {Tag('a', 'x'): 1}))
        self.assertFalse(isequal({Tag('a', 'x'): 1}, {Tag('a', 'x'): 2}))

        # lists are unhashable members, so tuples stand in
        self.assertTrue(isequal({(1, 'a'), (2, 'b')}, {(2, 'b'), (1, 'a')}))

    def test_equal_implies_hash(self):
        pairs = [
            ({Tag('a', 'x')}, {Tag('a', 'x')}),
            ({Tag('a', 'x')}, {Tag('a', 'y')}),
            ({1}, {1.0}),
            ({1: 'a'}, {1.0: 'a'}),
            ({Tag('a'): [1]}, {Tag('a'): [1]}),
            ({'a': {1, 2}}, {'a': {2, 1}}),
            (LonLat(1.0, 2.0), LonLat(1.0, 2.0)),
        ]
        for a, b in pairs:
            if isequal(a, b):
                self.assertEqual(hashof(a), hashof(b))
            self.assertEqual(isequal(a, b), isequal(b, a))

    def test_equal_reasons(self):
        with self.assertLogs('beanstruct.behavior', level='DEBUG') as cm:
            self.assertFalse(isequal([1, 2], [1, 3]))
        self.assertIn('element 1 differs', cm.output[-1])

        with self.assertLogs('beanstruct.behavior', level='DEBUG') as cm:
            self.assertFalse(EqualBehavior().isequal({'a': 1}, {'b': 1}))
        self.assertIn("key 'a' is missing", cm.output[0])


class TestJson(unittest.TestCase):

    def test_tojsontree(self):
        self.assertEqual({'1': [1.5]}, tojsontree({np.int8(1): [np.float32(1.5)]}))
        self.assertEqual('RED', tojsontree(Color.RED))
        self.assertEqual(1.5, tojsontree(Decimal('1.5')))
        self.assertEqual('1j', tojsontree(1j))
        self.assertEqual('01:02:03', tojsontree(time(1, 2, 3)))
        self.assertEqual([1, 2], tojsontree((1, 2)))
        self.assertEqual([1], tojsontree({1}))
        self.assertEqual(1425988977384, tojsontree(todate(1425988977384)))
        self.assertEqual('2015', tojsontree(todate(1425988977384), '%Y'))
        self.assertEqual({'lon': 1.0, 'lat': 2.0}, tojsontree(LonLat(1.0, 2.0)))

    def test_encode(self):
        self.assertEqual('{"lon":0.12,"lat":0.1}', encode(LonLat(0.12, 0.1)))

        user = reflect(User).populate(JACK).get()
        self.assertEqual(1425988977384, tojsontree(user)['birth'])
        text = encode(user, readable=True)
        self.assertIn('"birth": "2015-03-10 20:02:57"', text)
        self.assertIn('\n  "name": "jack"', text)

    def test_behavior_rules(self):
        lonlat = LonLat(1.0, 2.0)
        behavior = JsonValueBehavior(rules=Rules(excludes=[LonLat.__module__]))
        self.assertEqual(str(lonlat), behavior.detect(lonlat))


if __name__ == "__main__":
    unittest.main()
