# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Type descriptors
# ================
#
# A TypeDesc is the resolved shape of a type hint: the raw runtime class
# and, for generic containers, the descriptors of its type arguments in
# declaration order. For a keyed mapping argument 0 is the key type and
# argument 1 the value type (a "pair"); for a collection or array
# argument 0 is the element type.
#
# Hints whose generic information is missing (bare `list`, erased or
# unresolvable forward references, TypeVars) resolve to a descriptor
# with empty arguments, or to UNKNOWN. Empty arguments mean "unknown",
# never "scalar".


from typing import *
from dataclasses import dataclass
import collections.abc
import inspect
import types

import numpy as np

from . import kinds


@dataclass(frozen=True)
class TypeDesc:
    raw: Any                                # Concrete runtime class, or Any if unknown.
    args: Tuple['TypeDesc', ...] = ()       # Type argument descriptors.

    def ispair(self) -> bool:
        "Two type arguments: a key and a value."
        return 2 == len(self.args)

    def next(self, i: int = 0) -> 'TypeDesc':
        "Descriptor of type argument i, or UNKNOWN if there is none."
        if 0 <= i < len(self.args):
            return self.args[i]
        return UNKNOWN

    def nextpairtype(self) -> 'TypeDesc':
        "Value side of a pair."
        return self.next(1)

    def isunknown(self) -> bool:
        return self.raw is Any

    def kind(self) -> 'kinds.Category':
        return kinds.kindof(self)

    def __str__(self) -> str:
        name = getattr(self.raw, '__qualname__', None) or str(self.raw)
        if 0 == len(self.args):
            return name
        return name + '[' + ', '.join(str(a) for a in self.args) + ']'


UNKNOWN = TypeDesc(Any)
NONE_DESC = TypeDesc(type(None))

# Resolved descriptors, keyed by hint. Append-only: hints are immutable,
# so computing the same entry twice is harmless.
_TYPE_CACHE: Dict[Any, TypeDesc] = {}

# Type hints of each class, keyed by class. Append-only.
_HINT_CACHE: Dict[type, Dict[str, Any]] = {}


def resolvetype(hint: Any = Any) -> TypeDesc:
    "Resolve a type hint into a (cached) TypeDesc."
    if isinstance(hint, TypeDesc):
        return hint
    try:
        found = _TYPE_CACHE.get(hint)
    except TypeError:
        # Unhashable hint (rare); resolve without caching.
        return _resolve(hint)
    if found is None:
        found = _TYPE_CACHE.setdefault(hint, _resolve(hint))
    return found


def _resolve(hint: Any) -> TypeDesc:
    if hint is None or hint is type(None):
        return NONE_DESC

    if hint is Any or isinstance(hint, (str, TypeVar, ForwardRef)):
        return UNKNOWN

    if hint is ClassVar or hint is Final:
        return UNKNOWN

    origin = get_origin(hint)
    args = get_args(hint)

    if origin is Annotated:
        return resolvetype(args[0])

    if origin is ClassVar or origin is Final:
        return resolvetype(args[0]) if args else UNKNOWN

    if origin is Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        if 1 == len(members):
            return resolvetype(members[0])
        return UNKNOWN

    if origin is Literal:
        return resolvetype(type(args[0])) if args else UNKNOWN

    if origin is not None:
        if not isinstance(origin, type):
            return UNKNOWN

        # Callable argument lists are not type arguments.
        if issubclass(origin, collections.abc.Callable) and not issubclass(origin, type):
            return TypeDesc(origin)

        if issubclass(origin, np.ndarray):
            return TypeDesc(origin, _ndarrayargs(args))

        if origin is tuple:
            if 2 == len(args) and args[1] is Ellipsis:
                args = args[:1]
            elif args == ((),):
                args = ()

        return TypeDesc(origin, tuple(resolvetype(a) for a in args))

    if isinstance(hint, type):
        return TypeDesc(hint)

    return UNKNOWN


# NDArray[X] is ndarray[shape, dtype[X]]; keep only the element type.
def _ndarrayargs(args: Tuple[Any, ...]) -> Tuple[TypeDesc, ...]:
    if 2 != len(args):
        return ()
    dtargs = get_args(args[1]) if get_origin(args[1]) is np.dtype else ()
    if 0 == len(dtargs):
        return ()
    elem = resolvetype(dtargs[0])
    return () if elem.isunknown() else (elem,)


def typehints(cls: type) -> Dict[str, Any]:
    """
    Type hints of a class and its ancestors, cached per class.
    Hints that cannot be evaluated (unresolvable forward references) are
    kept as the raw annotations, which resolve to UNKNOWN.
    """
    found = _HINT_CACHE.get(cls)
    if found is None:
        try:
            found = get_type_hints(cls, include_extras=True)
        except (NameError, TypeError, AttributeError, SyntaxError):
            found = {}
            for klass in reversed(cls.__mro__):
                found.update(inspect.get_annotations(klass))
        found = _HINT_CACHE.setdefault(cls, found)
    return found


def attrtype(cls: type, name: str) -> TypeDesc:
    "Declared type of the attribute site cls.name, UNKNOWN if not annotated."
    return resolvetype(typehints(cls).get(name, Any))


def isclassvar(hint: Any) -> bool:
    "Hint declares a class-level (static) attribute."
    if get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    return hint is ClassVar or get_origin(hint) is ClassVar


def isfinal(hint: Any) -> bool:
    "Hint declares a final attribute."
    if get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    return hint is Final or get_origin(hint) is Final


__all__ = [
    'NONE_DESC',
    'TypeDesc',
    'UNKNOWN',
    'attrtype',
    'isclassvar',
    'isfinal',
    'resolvetype',
    'typehints',
]
