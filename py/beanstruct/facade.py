# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# FacadeObject binds the whole engine to one object: tier path access,
# declared types, conversion, flat mappings, JSON, and canonical
# text, hash and equality. StructUtility bundles the public functions.


from typing import *
import logging

from . import behavior
from . import dater
from . import jsoner
from . import kinds
from . import randoms
from . import resolves
from . import tierpath
from . import typedesc
from .errors import AttributeNotFound
from .reflecter import AttrDesc, Reflecter, Rules, reflect


logger = logging.getLogger(__name__)

# Marks a missing value, as None is a valid value.
_MISSING = object()


class FacadeObject:
    """
    Facade over one target object. A class target is default-constructed.
    """
    def __init__(self, target: Any, rules: Optional[Rules] = None) -> None:
        self.reflecter = Reflecter(target, rules)
        self.target = self.reflecter.get()

    @classmethod
    def wrap(cls, target: Any, rules: Optional[Rules] = None) -> 'FacadeObject':
        return cls(target, rules)

    def get(self) -> Any:
        return self.target

    def clone(self) -> Any:
        "New instance of the target's class with the same attribute values."
        return self.reflecter.clones()

    def gettype(self, path: Any = None) -> typedesc.TypeDesc:
        "Declared type of the target, or of the attribute at a tier path."
        if path is None:
            return typedesc.resolvetype(type(self.target))
        return tierpath.typepath(self.target, path)

    def getfield(self, path: Any) -> AttrDesc:
        "Attribute descriptor at a tier path (suffix paths allowed)."
        parts = tierpath.splitpath(path)
        try:
            return self._field(parts)
        except AttributeNotFound:
            flat = tierpath.deeptiermap(self.target)
            qualified = tierpath.matchkey(flat.keys(), tierpath.pathify(parts), self.target)
            return self._field(tierpath.splitpath(qualified))

    def _field(self, parts: List[str]) -> AttrDesc:
        if 1 == len(parts):
            return self.reflecter.field(parts[0])
        parent = tierpath.getpath(self.target, parts[:-1])
        if kinds.Category.BEAN != kinds.classify(parent):
            raise AttributeNotFound(tierpath.pathify(parts), type(parent))
        return Reflecter(parent, self.reflecter.rules).field(parts[-1])

    def getvalue(self, path: Any) -> Any:
        return tierpath.getpath(self.target, path)

    def setvalue(self, path: Any, val: Any) -> 'FacadeObject':
        tierpath.setpath(self.target, path, val)
        return self

    def setresolvedvalue(self, path: Any, val: Any) -> 'FacadeObject':
        "Convert val to the declared type at path, then set it."
        desc = tierpath.typepath(self.target, path)
        tierpath.setpath(self.target, path, resolves.resolve(desc, val, str(path)))
        return self

    def asmap(self) -> Dict[str, Any]:
        return self.reflecter.asmap()

    def copyto(self, dest: Any, excludes: Iterable[str] = ()) -> Any:
        return self.reflecter.copyto(dest, excludes)

    def populate(self, props: Union[Mapping[str, Any], str], excludes: Iterable[str] = ()) -> 'FacadeObject':
        self.reflecter.populate(props, excludes)
        return self

    def populate4test(self, generator: Any = None) -> 'FacadeObject':
        self.reflecter.populate4test(generator)
        return self

    def getjson(self, path: Any = None, readable: bool = False) -> str:
        "JSON text of the target, or of the value at a tier path."
        val = self.target if path is None else tierpath.getpath(self.target, path)
        return jsoner.encode(val, readable)

    def getjsonproperty(self, path: Any) -> Any:
        "JSON-safe tree of the value at a tier path."
        return jsoner.tojsontree(tierpath.getpath(self.target, path))

    def info(self) -> 'FacadeObject':
        logger.info('%s', jsoner.encode(self.target, readable=True))
        return self

    def reflection(self, path: Any = None) -> Reflecter:
        "Session on the target, or on the object at a tier path (suffix paths allowed)."
        if path is None:
            return self.reflecter
        return Reflecter(self._locate(tierpath.splitpath(path)), self.reflecter.rules.child())

    def _locate(self, parts: List[str]) -> Any:
        # A suffix path is walked in its qualified form, on the live objects.
        val = self.target
        for part in parts:
            val = tierpath.getprop(val, part, _MISSING)
            if val is _MISSING:
                flat = tierpath.deeptiermap(self.target)
                qualified = tierpath.matchkey(flat.keys(), tierpath.pathify(parts), self.target)
                return tierpath.getpath(self.target, qualified)
        return val

    def __str__(self) -> str:
        return behavior.stringify(self.target)

    def __hash__(self) -> int:
        return behavior.hashof(self.target)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FacadeObject):
            other = other.target
        return behavior.isequal(self.target, other)


def wrap(target: Any, rules: Optional[Rules] = None) -> FacadeObject:
    return FacadeObject.wrap(target, rules)


class StructUtility:
    def __init__(self):
        self.astext = dater.astext
        self.classify = kinds.classify
        self.decode = jsoner.decode
        self.deeptiermap = tierpath.deeptiermap
        self.encode = jsoner.encode
        self.findpath = tierpath.findpath
        self.generate = randoms.generate
        self.getpath = tierpath.getpath
        self.hashof = behavior.hashof
        self.isequal = behavior.isequal
        self.isnode = kinds.isnode
        self.jsonify = jsoner.jsonify
        self.kindof = kinds.kindof
        self.pathify = tierpath.pathify
        self.reflect = reflect
        self.resolve = resolves.resolve
        self.resolvetype = typedesc.resolvetype
        self.setpath = tierpath.setpath
        self.splitpath = tierpath.splitpath
        self.stringify = behavior.stringify
        self.todate = dater.todate
        self.tojsontree = jsoner.tojsontree
        self.typepath = tierpath.typepath
        self.wrap = wrap


__all__ = [
    'FacadeObject',
    'StructUtility',
    'wrap',
]
