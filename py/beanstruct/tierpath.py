# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Tier paths
# ==========
#
# A tier path is a list of segments joined by TIER_SEP, for example
# "address.lonlat.lat". Paths are walked one segment per level: mappings
# by key, sequences by index, and beans by exact attribute name.
#
# When the walk misses, the root is flattened into a TierMap (every
# mapping level under its full path) and the path is matched against the
# flat keys: exactly, then as a segment-aligned suffix of one stored key
# ("lat" finds "address.lonlat.lat"), then the other way round (a stored
# bare key that the qualified path ends with). More than one candidate
# is an AmbiguousPath error.
#
# NOTE: segments are not escaped; keys that contain TIER_SEP can only be
# found through the flattened keys.


from typing import *
import re

import numpy as np

from . import jsoner
from . import reflecter
from . import resolves
from .errors import AmbiguousPath, AttributeNotFound, PathNotFound
from .kinds import Category, classify, isbeanclass, islist, ismap, kindof
from .typedesc import TypeDesc, UNKNOWN, attrtype, resolvetype


TIER_SEP = '.'

R_INTEGER_KEY = re.compile(r'^[-0-9]+$')

# Marks a missing value, as None is a valid value.
_MISSING = object()


class TierMap(dict):
    """
    Flat mapping of tier paths to values. A missing key is looked up by
    suffix matching, for both [] and get(). Membership (in) stays exact.
    """
    def __missing__(self, key: Any) -> Any:
        if not isinstance(key, str):
            raise PathNotFound(str(key), self)
        return dict.__getitem__(self, matchkey(self, key, self))

    def get(self, key: Any, default: Any = None) -> Any:
        if dict.__contains__(self, key):
            return dict.__getitem__(self, key)
        try:
            return self[key]
        except PathNotFound:
            return default


def splitpath(path: Any) -> List[str]:
    "Segments of a tier path: a dotted string, a list of segments, or an index."
    if islist(path):
        return [str(p) for p in path]
    if isinstance(path, int) and not isinstance(path, bool):
        return [str(path)]
    if isinstance(path, str):
        return path.split(TIER_SEP) if path else []
    raise PathNotFound(str(path))


def pathify(parts: Iterable[Any]) -> str:
    "Tier path text of a list of segments."
    return TIER_SEP.join(str(p) for p in parts)


def matchkey(keys: Iterable[Any], query: str, root: Any = None) -> str:
    """
    The one stored key that query refers to: an exact key, else the key
    ending in query, else the key that query ends with.
    """
    keys = [k for k in keys if isinstance(k, str)]
    if query in keys:
        return query

    suffix = TIER_SEP + query
    found = [k for k in keys if k.endswith(suffix)]

    # Vice versa: a qualified query against bare stored keys.
    if 0 == len(found):
        found = [k for k in keys if query.endswith(TIER_SEP + k)]

    if 1 == len(found):
        return found[0]
    if 0 == len(found):
        raise PathNotFound(query, root)
    raise AmbiguousPath(query, sorted(found))


def findpath(flat: Mapping[str, Any], query: str) -> Any:
    "Value of query in a flat key space, by exact or suffix match."
    return flat[matchkey(flat, query, flat)]


def deeptiermap(tree: Any) -> TierMap:
    """
    Flatten nested mappings (or JSON text, or a bean) into a TierMap.
    Each mapping level is stored under its full path as well as its
    leaves. Lists are leaves.
    """
    if isinstance(tree, str):
        tree = jsoner.decode(tree)
    elif Category.BEAN == classify(tree):
        tree = reflecter.Reflecter(tree).asmap()

    if not ismap(tree):
        raise PathNotFound('', tree)

    out = TierMap()

    def flatten(node: Mapping, prefix: Optional[str]) -> None:
        for k, v in node.items():
            key = str(k) if prefix is None else prefix + TIER_SEP + str(k)
            dict.__setitem__(out, key, v)
            if ismap(v):
                flatten(v, key)

    flatten(tree, None)
    return out


def getprop(node: Any, key: str, alt: Any = None) -> Any:
    """
    One level of a walk: a mapping key (integer keys match digit
    segments), a sequence index, or a bean attribute by exact name.
    """
    if node is None or isinstance(node, type):
        return alt

    if ismap(node):
        if key in node:
            return node[key]
        for k in node:
            if not isinstance(k, str) and str(k) == key:
                return node[k]
        return alt

    if islist(node) or isinstance(node, np.ndarray):
        if not R_INTEGER_KEY.match(key):
            return alt
        i = int(key)
        return node[i] if 0 <= i < len(node) else alt

    if Category.BEAN == classify(node):
        try:
            return reflecter.Reflecter(node).val(key)
        except AttributeNotFound:
            return alt

    return alt


def _walk(root: Any, parts: List[str]) -> Any:
    val = root
    for part in parts:
        val = getprop(val, part, _MISSING)
        if val is _MISSING:
            break
    return val


def _flatten(root: Any) -> TierMap:
    if isinstance(root, type):
        root = reflecter.instantiate(root)
    return deeptiermap(root)


def getpath(root: Any, path: Any) -> Any:
    """
    Value at a tier path. The path is walked exactly first, then matched
    by suffix. Raises PathNotFound or AmbiguousPath.
    """
    parts = splitpath(path)
    if 0 == len(parts):
        return root

    val = _walk(root, parts)
    if val is not _MISSING:
        return val

    if not ismap(root) and Category.BEAN != classify(root):
        raise PathNotFound(pathify(parts), root)

    flat = _flatten(root)
    return dict.__getitem__(flat, matchkey(flat, pathify(parts), root))


def setpath(root: Any, path: Any, val: Any) -> Any:
    """
    Set the value at a tier path. A suffix path is first resolved to its
    qualified form. Missing intermediate beans are default-constructed
    from their declared type, missing mapping levels are created as dicts.
    Returns root.
    """
    parts = splitpath(path)
    if 0 == len(parts):
        raise PathNotFound('', root)

    if _walk(root, parts[:1]) is _MISSING and \
            (ismap(root) or Category.BEAN == classify(root)):
        try:
            parts = splitpath(matchkey(_flatten(root).keys(), pathify(parts), root))
        except PathNotFound:
            pass

    parent = root
    for i, part in enumerate(parts[:-1]):
        child = getprop(parent, part, _MISSING)
        if child is None or child is _MISSING:
            child = _makechild(parent, part)
            _setprop(parent, part, child)
        parent = child

    _setprop(parent, parts[-1], val)
    return root


def _makechild(parent: Any, part: str) -> Any:
    if Category.BEAN == classify(parent):
        desc = reflecter.Reflecter(parent).typeof(part)
        if isbeanclass(desc.raw):
            return reflecter.instantiate(desc.raw)
        if Category.KEYED_MAPPING == kindof(desc):
            return resolves.concretekind(desc.raw)()
        if desc.isunknown():
            return {}
        raise PathNotFound(part, parent)

    if ismap(parent):
        return {}

    raise PathNotFound(part, parent)


def _setprop(parent: Any, key: str, val: Any) -> None:
    if ismap(parent):
        if key not in parent:
            for k in parent:
                if not isinstance(k, str) and str(k) == key:
                    key = k
                    break
        parent[key] = val

    elif islist(parent) or isinstance(parent, np.ndarray):
        if not R_INTEGER_KEY.match(key):
            raise PathNotFound(key, parent)
        i = int(key)
        if i == len(parent) and isinstance(parent, list):
            parent.append(val)
        elif 0 <= i < len(parent):
            parent[i] = val
        else:
            raise PathNotFound(key, parent)

    elif Category.BEAN == classify(parent):
        reflecter.Reflecter(parent).setval(key, val)

    else:
        raise PathNotFound(key, parent)


def typepath(root: Any, path: Any) -> TypeDesc:
    """
    Declared type at a tier path of an object (or class). Mapping levels
    step into the value type, sequences into the element type.
    """
    parts = splitpath(path)
    try:
        return _typewalk(root, parts)
    except (AttributeNotFound, PathNotFound):
        flat = _flatten(root)
        return _typewalk(root, splitpath(matchkey(flat.keys(), pathify(parts), root)))


def _typewalk(root: Any, parts: List[str]) -> TypeDesc:
    if isinstance(root, type):
        node, desc = None, resolvetype(root)
    else:
        node, desc = root, resolvetype(type(root))

    for part in parts:
        kind = Category.BEAN if desc.isunknown() else kindof(desc)
        child = _MISSING

        if Category.KEYED_MAPPING == kind:
            if node is not None:
                child = getprop(node, part, _MISSING)
            desc = desc.nextpairtype()
            # A missing key still has the declared value type.
            if child is _MISSING and desc.isunknown():
                raise PathNotFound(pathify(parts), root)

        elif kind in (Category.COLLECTION, Category.ARRAY):
            if not R_INTEGER_KEY.match(part):
                raise PathNotFound(pathify(parts), root)
            if node is not None:
                child = getprop(node, part, _MISSING)
            desc = desc.next(int(part)) if 1 < len(desc.args) else desc.next()

        elif Category.BEAN == kind and node is not None:
            refl = reflecter.Reflecter(node)
            desc = refl.typeof(part)
            child = refl.val(part)

        elif Category.BEAN == kind and not desc.isunknown():
            if part not in [attr.name for attr in reflecter.schemaof(desc.raw)]:
                raise AttributeNotFound(part, desc.raw)
            desc = attrtype(desc.raw, part)

        else:
            raise PathNotFound(pathify(parts), root)

        if desc.isunknown() and child is not _MISSING and child is not None:
            desc = resolvetype(type(child))

        node = None if child is _MISSING else child

    return desc


__all__ = [
    'TIER_SEP',
    'TierMap',
    'deeptiermap',
    'findpath',
    'getpath',
    'getprop',
    'matchkey',
    'pathify',
    'setpath',
    'splitpath',
    'typepath',
]
