# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# JSON text and JSON-safe value trees. Beans are written as their flat
# attribute mappings; dates as epoch milliseconds, or as calendar text
# when a date format is given.


from typing import *
from datetime import time
import json

from . import reflecter
from .behavior import ValueBehavior, elementsof, stringify
from .dater import DATE_FMT, astext, tomillis
from .exchanges import unwrap


class JsonValueBehavior(ValueBehavior):
    "Render any value as a tree of dicts, lists and JSON scalars."

    def __init__(
            self,
            datefmt: Optional[str] = None,
            rules: Optional['reflecter.Rules'] = None,
    ) -> None:
        super().__init__(rules)
        self.datefmt = datefmt

    def onnull(self, val: Any) -> Any:
        return None

    def onprimitive(self, val: Any) -> Any:
        return str(val) if isinstance(val, complex) else val

    def onboxed(self, val: Any) -> Any:
        return self.detect(unwrap(val))

    def onstring(self, val: Any) -> Any:
        return val

    def ondate(self, val: Any) -> Any:
        if self.datefmt is not None or isinstance(val, time):
            return astext(val, self.datefmt or DATE_FMT)
        return tomillis(val)

    def onbiginteger(self, val: Any) -> Any:
        return int(val)

    def onbigdecimal(self, val: Any) -> Any:
        return float(val)

    def onenum(self, val: Any) -> Any:
        return val.name

    def onsequence(self, val: Any) -> Any:
        return [self.detect(v) for v in elementsof(val)]

    def onmap(self, val: Any) -> Any:
        return dict((k if isinstance(k, str) else stringify(k), self.detect(v))
                    for k, v in val.items())

    def onbean(self, val: Any) -> Any:
        if self.isexcluded(val):
            return str(val)
        return self.onmap(reflecter.Reflecter(val, self.rules).asmap())


def decode(text: str) -> Any:
    "Value tree of JSON text."
    return json.loads(text)


def tojsontree(val: Any = None, datefmt: Optional[str] = None) -> Any:
    "JSON-safe tree of any value."
    return JsonValueBehavior(datefmt).detect(val)


def encode(val: Any = None, readable: bool = False, datefmt: Optional[str] = None) -> str:
    """
    JSON text of any value. Readable text is indented, and renders
    dates as calendar text unless another date format is given.
    """
    if readable:
        return jsonify(tojsontree(val, datefmt or DATE_FMT))
    return json.dumps(tojsontree(val, datefmt), separators=(',', ':'), ensure_ascii=False)


def jsonify(val: Any = None, indent: int = 2) -> str:
    "Indented JSON text of a JSON-safe value."
    return json.dumps(val, indent=indent, separators=(',', ': ') if indent else (',', ':'),
                      ensure_ascii=False)


__all__ = [
    'JsonValueBehavior',
    'decode',
    'encode',
    'jsonify',
    'tojsontree',
]
