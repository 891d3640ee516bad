# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Reflecter
# =========
#
# Attribute accessor and object mapper for beans: plain classes,
# dataclasses and slotted classes. A Reflecter session introspects one
# target object once, and then reads and writes its attributes by
# exact name, exports them as a flat name->value mapping (nested beans
# become nested mappings), and populates them from such a mapping.
#
# Population rules (aliases, exchange functions, auto-exchange, excluded
# module prefixes, trace) are held in an explicit Rules value. Each
# session owns a copy; populate and copyto also accept one directly.
#
# Attribute schemas are built once per class, from annotations (all
# ancestors, base class first), __slots__ and dataclass fields, and
# cached for the life of the process. Names private to a class scope
# (dunders, name-mangled privates) are never attributes.
#
# NOTE: sessions are not thread-safe; populate and the rule setters
# mutate session state in place.


from typing import *
from dataclasses import dataclass, fields as dcfields, is_dataclass, MISSING
import inspect
import logging
import numbers

from . import jsoner
from . import randoms
from . import resolves
from .errors import (
    AttributeNotFound,
    InaccessibleAttribute,
    ValueAssignmentError,
)
from .kinds import Category, classify, isbeanclass, ismap, kindof
from .typedesc import TypeDesc, isclassvar, isfinal, resolvetype, typehints


logger = logging.getLogger(__name__)

# Beans from these modules (and their submodules) are kept as object
# references in flat mappings, not converted.
EXCLUDE_PACKAGES = ('builtins', 'beanstruct', 'logging', 'threading')


@dataclass(frozen=True)
class AttrDesc:
    name: str                     # Attribute name.
    owner: type                   # Declaring class.
    hint: Any = Any               # Declared type hint, Any if not annotated.
    isstatic: bool = False        # Declared ClassVar.
    isfinal: bool = False         # Declared Final.
    isaccessible: bool = True     # False for read-only properties.

    @property
    def typedesc(self) -> TypeDesc:
        return resolvetype(self.hint)

    @property
    def qualname(self) -> str:
        return self.owner.__module__ + '.' + self.owner.__qualname__ + '.' + self.name


class Rules:
    """
    Population rules for a session.
    """
    def __init__(
        self,
        aliases: Optional[Dict[str, str]] = None,     # Target attribute name -> source key.
        exchanges: Optional[Dict[str, Tuple[Callable, bool]]] = None,  # Source key -> (fn, withattr).
        autoexchange: bool = True,                    # Coerce values to declared types.
        excludes: Optional[Iterable[str]] = None,     # Module prefixes kept unconverted.
        trace: bool = False,                          # Log every get and set.
    ) -> None:
        self.aliases = dict(aliases or {})
        self.exchanges = dict(exchanges or {})
        self.autoexchange = autoexchange
        self.excludes = list(EXCLUDE_PACKAGES if excludes is None else excludes)
        self.trace = trace

    def copy(self) -> 'Rules':
        return Rules(self.aliases, self.exchanges, self.autoexchange, self.excludes, self.trace)

    def child(self) -> 'Rules':
        "Rules for a nested bean: aliases and exchanges are per-level, so they are dropped."
        return Rules(autoexchange=self.autoexchange, excludes=self.excludes, trace=self.trace)

    def isexcluded(self, val: Any) -> bool:
        module = type(val).__module__ or ''
        for prefix in self.excludes:
            if module == prefix or module.startswith(prefix + '.'):
                return True
        return False


# Attribute schema of each class. Append-only.
_SCHEMAS: Dict[type, List[AttrDesc]] = {}


def isscoped(cls: type, name: str) -> bool:
    "Name is private to a class scope: a dunder, or mangled by a class in the MRO."
    if name.startswith('__'):
        return True
    for klass in cls.__mro__:
        if name.startswith('_' + klass.__name__.lstrip('_') + '__'):
            return True
    return False


def schemaof(cls: type) -> List[AttrDesc]:
    "Declared attributes of a class (cached)."
    found = _SCHEMAS.get(cls)
    if found is None:
        found = _SCHEMAS.setdefault(cls, _scan(cls))
    return found


def _scan(cls: type) -> List[AttrDesc]:
    owners: Dict[str, type] = {}

    # Walk every ancestor, base class first, for nested classes too.
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name in inspect.get_annotations(klass):
            owners[name] = klass
        slots = klass.__dict__.get('__slots__', ())
        for name in ([slots] if isinstance(slots, str) else slots):
            if name not in ('__dict__', '__weakref__'):
                owners[name] = klass

    hints = typehints(cls)
    attrs = []
    for name, owner in owners.items():
        if isscoped(cls, name):
            continue
        hint = hints.get(name, Any)
        prop = inspect.getattr_static(cls, name, None)
        attrs.append(AttrDesc(
            name=name,
            owner=owner,
            hint=hint,
            isstatic=isclassvar(hint),
            isfinal=isfinal(hint),
            isaccessible=not (isinstance(prop, property) and prop.fset is None),
        ))

    return attrs


def _attrsof(target: Any) -> List[AttrDesc]:
    cls = type(target)
    attrs = list(schemaof(cls))
    known = set(attr.name for attr in attrs)

    # Instance attributes that have no declaration.
    for name in getattr(target, '__dict__', {}):
        if name not in known and not isscoped(cls, name):
            attrs.append(AttrDesc(name=name, owner=cls))

    return attrs


def instantiate(cls: type) -> Any:
    """
    Default-construct an instance of cls. If the constructor needs
    arguments, the instance is created without calling it and dataclass
    defaults are applied.
    """
    try:
        return cls()
    except TypeError:
        obj = cls.__new__(cls)
        if is_dataclass(cls):
            for f in dcfields(cls):
                if f.default is not MISSING:
                    object.__setattr__(obj, f.name, f.default)
                elif f.default_factory is not MISSING:
                    object.__setattr__(obj, f.name, f.default_factory())
        return obj


def _typename(val: Any) -> str:
    return 'None' if val is None else type(val).__qualname__


def _assignable(desc: TypeDesc, val: Any) -> bool:
    if val is None or desc.isunknown():
        return True
    raw = desc.raw
    if not isinstance(raw, type) or raw is object:
        return True
    # bool is an int subclass, but only fits bool attributes.
    if isinstance(val, bool) and issubclass(raw, numbers.Number) and not issubclass(raw, bool):
        return False
    if raw is float and isinstance(val, int):
        return True
    if raw is complex and isinstance(val, (int, float)):
        return True
    try:
        return isinstance(val, raw)
    except TypeError:
        return True


class Reflecter:
    """
    Accessor session over one target object. A class argument is
    default-constructed (type-only mode); None gives an empty session.
    """
    def __init__(self, target: Any = None, rules: Optional[Rules] = None) -> None:
        if isinstance(target, type):
            target = instantiate(target)
        self.target = target
        self.rules = Rules() if rules is None else rules.copy()
        self.attrs: List[AttrDesc] = [] if target is None else _attrsof(target)

    def get(self) -> Any:
        "The target object."
        return self.target

    def fields(self) -> List[AttrDesc]:
        return list(self.attrs)

    def field(self, name: str) -> AttrDesc:
        "Attribute by exact name."
        for attr in self.attrs:
            if attr.name == name:
                return attr
        raise AttributeNotFound(name, None if self.target is None else type(self.target))

    def typeof(self, name: str) -> TypeDesc:
        """
        Declared type of an attribute. If the attribute is not annotated,
        the type of its current value is used.
        """
        attr = self.field(name)
        desc = attr.typedesc
        if desc.isunknown():
            val = self._getval(attr)
            if val is not None:
                return resolvetype(type(val))
        return desc

    def val(self, name: str) -> Any:
        "Value of an attribute by exact name (None if unset)."
        return self._getval(self.field(name))

    def setval(self, name: str, val: Any) -> 'Reflecter':
        "Set an attribute by exact name."
        self._setval(self.field(name), val)
        return self

    def asmap(self) -> Dict[str, Any]:
        "Flat name->value mapping of the target; nested beans become nested mappings."
        out = {}
        for attr in self.attrs:
            if attr.isstatic or attr.isfinal:
                continue
            try:
                val = self._getval(attr)
            except Exception as err:
                logger.error('get %s failed: %s', attr.qualname, err)
                continue

            if Category.BEAN == classify(val) and not self.rules.isexcluded(val):
                if self.rules.trace:
                    logger.info('transform %s to map for property %s',
                                type(val).__qualname__, attr.qualname)
                val = Reflecter(val, self.rules).asmap()

            out[attr.name] = val
        return out

    def populate(
            self,
            props: Union[Mapping[str, Any], str],
            excludes: Iterable[str] = (),
            rules: Optional[Rules] = None,
    ) -> 'Reflecter':
        """
        Populate the target from a name->value mapping (or JSON text).
        Attributes that fail to populate are logged and skipped.
        """
        if isinstance(props, str):
            props = jsoner.decode(props)
        if not props:
            return self

        rules = self.rules if rules is None else rules
        excludes = list(excludes)

        for attr in self.attrs:
            if attr.isstatic or attr.isfinal:
                continue

            key = rules.aliases.get(attr.name, attr.name)
            if key not in props or key in excludes:
                continue

            val = props[key]
            if val is None:
                continue

            try:
                self._setval(attr, self._exchangeval(attr, key, val, rules, excludes))
            except Exception as err:
                logger.error('populate %s from key %s failed: %s', attr.qualname, key, err)

        return self

    def populate4test(self, generator: Any = None) -> 'Reflecter':
        "Populate every writable attribute with a random value."
        generator = randoms.DEFAULT if generator is None else generator
        for attr in self.attrs:
            if attr.isstatic or attr.isfinal or not attr.isaccessible:
                continue
            try:
                self._setval(attr, generator.generate(attr))
            except Exception as err:
                logger.error('populate %s with a random value failed: %s', attr.qualname, err)
        return self

    def copyto(self, dest: Any, excludes: Iterable[str] = ()) -> Any:
        "Copy attributes to dest (an object or a class), carrying this session's rules."
        return Reflecter(dest, self.rules).populate(self.asmap(), excludes).get()

    def clones(self) -> Any:
        "A new instance of the target's class with the same attribute values."
        return self.copyto(type(self.target))

    def alias(self, targetname: str, sourcekey: str) -> 'Reflecter':
        "Populate attribute targetname from source key sourcekey."
        self.rules.aliases[targetname] = sourcekey
        return self

    def exchange(self, sourcekey: str, fn: Callable, withattr: bool = False) -> 'Reflecter':
        """
        Pass the value under sourcekey through fn before it is set. With
        withattr, fn receives an (AttrDesc, value) tuple.
        """
        self.rules.exchanges[sourcekey] = (fn, withattr)
        return self

    def noneautoexchange(self) -> 'Reflecter':
        self.rules.autoexchange = False
        return self

    def packageignore(self, prefix: str) -> 'Reflecter':
        "Keep beans from modules under prefix unconverted in flat mappings."
        if prefix not in self.rules.excludes:
            self.rules.excludes.append(prefix)
        return self

    def settrace(self, trace: bool = True) -> 'Reflecter':
        self.rules.trace = trace
        return self

    def filter(self, decision: Callable[[AttrDesc], bool]) -> 'Reflecter':
        "Keep only the attributes accepted by decision."
        self.attrs = [attr for attr in self.attrs if decision(attr)]
        return self

    def exchangeby(
            self,
            fn: Callable,
            decision: Callable[[AttrDesc], bool],
            withattr: bool = False,
    ) -> 'Reflecter':
        "Exchange the value of every attribute accepted by decision through fn."
        for attr in self.attrs:
            if decision(attr):
                self.exchange(self.rules.aliases.get(attr.name, attr.name), fn, withattr)
        return self

    def exchangeeach(self, fn: Callable, *names: str) -> 'Reflecter':
        "Exchange the values under each of names through fn."
        for name in names:
            self.exchange(name, fn)
        return self

    def nested(self, name: str) -> 'Reflecter':
        "Session on the value of attribute name, with this session's child rules."
        return Reflecter(self.val(name), self.rules.child())

    def onlyprimitives(self) -> 'Reflecter':
        return self.filter(lambda attr: Category.PRIMITIVE == kindof(attr.typedesc))

    def proploop(self, fn: Callable[[AttrDesc, Any], Any]) -> 'Reflecter':
        "Call fn(attr, value) for each attribute."
        for attr in self.attrs:
            fn(attr, self._getval(attr))
        return self

    def _getval(self, attr: AttrDesc) -> Any:
        try:
            val = getattr(self.target, attr.name)
        except AttributeError:
            val = None
        if self.rules.trace:
            logger.info('get %s (%s)', attr.qualname, _typename(val))
        return val

    def _setval(self, attr: AttrDesc, val: Any) -> None:
        target = self.target
        if target is None or not attr.isaccessible:
            raise InaccessibleAttribute(attr.name, None if target is None else type(target))

        desc = attr.typedesc
        if not _assignable(desc, val):
            raise ValueAssignmentError(attr.qualname, desc.raw, val)

        if self.rules.trace:
            old = getattr(target, attr.name, None)
            logger.info('set %s = %r (%s -> %s)', attr.qualname, val, _typename(old), _typename(val))

        try:
            setattr(target, attr.name, val)
        except AttributeError:
            # Frozen dataclasses and similar guards.
            try:
                object.__setattr__(target, attr.name, val)
            except (AttributeError, TypeError) as err:
                raise InaccessibleAttribute(attr.name, type(target)) from err

    def _beanclass(self, attr: AttrDesc) -> Optional[type]:
        desc = attr.typedesc
        if not desc.isunknown():
            return desc.raw if isbeanclass(desc.raw) else None
        cur = self._getval(attr)
        if Category.BEAN == classify(cur) and not self.rules.isexcluded(cur):
            return type(cur)
        return None

    def _exchangeval(
            self,
            attr: AttrDesc,
            key: str,
            val: Any,
            rules: Rules,
            excludes: List[str],
    ) -> Any:
        beancls = self._beanclass(attr)
        if beancls is not None and ismap(val):
            child = Reflecter(instantiate(beancls), rules.child())
            return child.populate(val, excludes).get()

        exchange = rules.exchanges.get(key)
        if exchange is not None:
            fn, withattr = exchange
            return fn((attr, val)) if withattr else fn(val)

        desc = attr.typedesc
        if rules.autoexchange and not desc.isunknown():
            return resolves.resolve(desc, val, attr.qualname)

        return val


def reflect(target: Any = None, rules: Optional[Rules] = None) -> Reflecter:
    "Introspect target (an object, or a class to default-construct)."
    return Reflecter(target, rules)


__all__ = [
    'AttrDesc',
    'EXCLUDE_PACKAGES',
    'Reflecter',
    'Rules',
    'instantiate',
    'isscoped',
    'reflect',
    'schemaof',
]
