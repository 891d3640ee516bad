# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Value resolver
# ==============
#
# Convert a loosely typed value (decoded JSON, text) into the precisely
# typed value a target declaration requires. Containers are rebuilt as
# the concrete kind of the target, and their elements, keys and values
# are converted recursively with the target's type arguments.


from typing import *
from collections import deque
import array
import collections.abc as cabc
import inspect

import numpy as np

from . import reflecter
from .errors import UnresolvableConversion
from .exchanges import exchangeval, tointeger
from .kinds import Category, PRIMITIVE_TYPES, SCALARS, isscalar, ismap, kindof
from .typedesc import TypeDesc, resolvetype


# Abstract container origins and the concrete kind built for each.
CONCRETE_KINDS: Dict[type, type] = {
    cabc.Iterable: list,
    cabc.Collection: list,
    cabc.Sequence: list,
    cabc.MutableSequence: list,
    cabc.Set: set,
    cabc.MutableSet: set,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
}


def astypedesc(target: Any) -> TypeDesc:
    "TypeDesc of a TypeDesc, an AttrDesc or a type hint."
    if isinstance(target, TypeDesc):
        return target
    if isinstance(target, reflecter.AttrDesc):
        return target.typedesc
    return resolvetype(target)


def concretekind(raw: type) -> type:
    "Concrete class to build for a (possibly abstract) container type."
    found = CONCRETE_KINDS.get(raw)
    if found is not None:
        return found
    if inspect.isabstract(raw):
        if issubclass(raw, cabc.Mapping):
            return dict
        if issubclass(raw, cabc.Set):
            return set
        return list
    return raw


def resolve(target: Any, val: Any, name: Optional[str] = None) -> Any:
    """
    Convert val into the type described by target (a TypeDesc, an
    AttrDesc or a type hint). None stays None, and unknown targets pass
    the value through. Raises UnresolvableConversion when the value has
    no conversion into the target shape.
    """
    desc = astypedesc(target)
    if name is None and isinstance(target, reflecter.AttrDesc):
        name = target.qualname

    if val is None or desc.isunknown():
        return val

    kind = kindof(desc)

    if kind in SCALARS:
        return _resolvescalar(desc, val, name)

    if Category.ARRAY == kind:
        return _resolvearray(desc, val, name)

    if Category.COLLECTION == kind:
        return _resolvecollection(desc, val, name)

    if Category.KEYED_MAPPING == kind:
        return _resolvemapping(desc, val, name)

    if Category.BEAN == kind:
        return _resolvebean(desc, val, name)

    # NULL target with a defined value.
    raise UnresolvableConversion(desc, val, name)


def _resolvescalar(desc: TypeDesc, val: Any, name: Optional[str]) -> Any:
    if not isscalar(val):
        raise UnresolvableConversion(desc, val, name)
    try:
        return exchangeval(desc.raw, val)
    except (ValueError, TypeError, ArithmeticError) as err:
        raise UnresolvableConversion(desc, val, name) from err


def _items(desc: TypeDesc, val: Any, name: Optional[str]) -> List[Any]:
    "Elements of a non-string, non-mapping iterable."
    if isinstance(val, (str, cabc.Mapping)) or not isinstance(val, cabc.Iterable):
        raise UnresolvableConversion(desc, val, name)
    return list(val)


def _resolvearray(desc: TypeDesc, val: Any, name: Optional[str]) -> Any:
    raw = desc.raw
    items = _items(desc, val, name)

    if issubclass(raw, tuple):
        # Fixed shape: one type argument per position.
        if 1 < len(desc.args):
            if len(items) != len(desc.args):
                raise UnresolvableConversion(desc, val, name)
            return tuple(resolve(a, v, name) for a, v in zip(desc.args, items))
        return tuple(resolve(desc.next(), v, name) for v in items)

    if issubclass(raw, np.ndarray):
        elem = desc.next()
        if elem.isunknown():
            return val if isinstance(val, np.ndarray) else np.asarray(items)
        out = [resolve(elem, v, name) for v in items]
        if isinstance(elem.raw, type) and \
                (issubclass(elem.raw, np.generic) or elem.raw in PRIMITIVE_TYPES):
            return np.array(out, dtype=elem.raw)
        return np.array(out, dtype=object)

    if issubclass(raw, array.array):
        if isinstance(val, array.array):
            return val
        out = [exchangeval(float, v) if isinstance(v, float) else tointeger(v) for v in items]
        return array.array('d' if any(isinstance(v, float) for v in out) else 'q', out)

    if issubclass(raw, memoryview):
        return memoryview(bytes(tointeger(v) for v in items))

    # bytes, bytearray
    try:
        return raw(tointeger(v) for v in items)
    except (ValueError, TypeError) as err:
        raise UnresolvableConversion(desc, val, name) from err


def _resolvecollection(desc: TypeDesc, val: Any, name: Optional[str]) -> Any:
    raw = concretekind(desc.raw)
    elem = desc.next()
    out = [resolve(elem, v, name) for v in _items(desc, val, name)]
    if raw is deque:
        return deque(out)
    return raw(out)


def _resolvemapping(desc: TypeDesc, val: Any, name: Optional[str]) -> Any:
    if not ismap(val):
        raise UnresolvableConversion(desc, val, name)

    raw = concretekind(desc.raw)
    keydesc = desc.next(0)
    valdesc = desc.nextpairtype()

    pairs = [(resolve(keydesc, k, name), resolve(valdesc, v, name)) for k, v in val.items()]

    if issubclass(raw, cabc.MutableMapping):
        out = raw()
        for k, v in pairs:
            out[k] = v
        return out
    return raw(dict(pairs))


def _resolvebean(desc: TypeDesc, val: Any, name: Optional[str]) -> Any:
    raw = desc.raw
    if isinstance(val, raw):
        return val
    if ismap(val):
        return reflecter.Reflecter(reflecter.instantiate(raw)).populate(val).get()
    raise UnresolvableConversion(desc, val, name)


__all__ = [
    'CONCRETE_KINDS',
    'astypedesc',
    'concretekind',
    'resolve',
]
