# beanstruct init
#
# Object introspection for beans (plain classes, dataclasses, slotted
# classes) and decoded JSON value trees.
#
# Main utilities
# - resolvetype: recursive type descriptor of a type hint.
# - classify, kindof: shape category of a value or a type.
# - reflect: attribute accessor and object mapper session.
# - getpath, setpath, typepath: tier path access, with suffix matching.
# - deeptiermap: flatten a value tree into tier path keys.
# - resolve: convert a loosely typed value into a declared type.
# - stringify, hashof, isequal: canonical text, hash and equality.
# - wrap: facade binding all of the above to one object.

# reflecter loads first: the modules it imports refer back to it.
from .reflecter import (
    EXCLUDE_PACKAGES,
    AttrDesc,
    Reflecter,
    Rules,
    instantiate,
    reflect,
)

from .behavior import (
    NULL_STR,
    ValueBehavior,
    hashof,
    isequal,
    stringify,
)

from .dater import (
    DATE_FMT,
    DATE_ZONE,
    astext,
    todate,
    tomillis,
)

from .errors import (
    AmbiguousPath,
    AttributeNotFound,
    InaccessibleAttribute,
    PathNotFound,
    StructError,
    UnresolvableConversion,
    ValueAssignmentError,
)

from .facade import (
    FacadeObject,
    StructUtility,
    wrap,
)

from .jsoner import (
    JsonValueBehavior,
    decode,
    encode,
    jsonify,
    tojsontree,
)

from .kinds import (
    Category,
    classify,
    isnode,
    kindof,
)

from .randoms import (
    Randoms,
    generate,
)

from .resolves import (
    resolve,
)

from .tierpath import (
    TIER_SEP,
    TierMap,
    deeptiermap,
    findpath,
    getpath,
    setpath,
    typepath,
)

from .typedesc import (
    TypeDesc,
    UNKNOWN,
    resolvetype,
)


__all__ = [
    'AmbiguousPath',
    'AttrDesc',
    'AttributeNotFound',
    'Category',
    'DATE_FMT',
    'DATE_ZONE',
    'EXCLUDE_PACKAGES',
    'FacadeObject',
    'InaccessibleAttribute',
    'JsonValueBehavior',
    'NULL_STR',
    'PathNotFound',
    'Randoms',
    'Reflecter',
    'Rules',
    'StructError',
    'StructUtility',
    'TIER_SEP',
    'TierMap',
    'TypeDesc',
    'UNKNOWN',
    'UnresolvableConversion',
    'ValueAssignmentError',
    'ValueBehavior',
    'astext',
    'classify',
    'decode',
    'deeptiermap',
    'encode',
    'findpath',
    'generate',
    'getpath',
    'hashof',
    'instantiate',
    'isequal',
    'isnode',
    'jsonify',
    'kindof',
    'reflect',
    'resolve',
    'resolvetype',
    'setpath',
    'stringify',
    'todate',
    'tojsontree',
    'tomillis',
    'typepath',
    'wrap',
]
