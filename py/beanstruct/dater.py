# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Date conversion between epoch milliseconds, calendar text and
# datetime objects. Text uses a fixed reference zone so that the same
# timestamp always renders the same way.


from typing import *
from datetime import date, datetime, time, timedelta, timezone
import re

# Reference zone for timestamp-to-text conversion (UTC+8).
DATE_ZONE = timezone(timedelta(hours=8))

# Calendar text format.
DATE_FMT = '%Y-%m-%d %H:%M:%S'

# Accepted text formats, tried in order.
DATE_FMTS = [
    DATE_FMT,
    '%Y-%m-%d %H:%M:%S.%f',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%S.%f',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
    '%Y/%m/%d %H:%M:%S',
    '%Y/%m/%d',
]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

R_MILLIS = re.compile(r'^-?\d+$')


def frommillis(ms: Union[int, float]) -> datetime:
    "Datetime in the reference zone for epoch milliseconds."
    return (EPOCH + timedelta(milliseconds=ms)).astimezone(DATE_ZONE)


def tomillis(val: Union[date, datetime]) -> int:
    "Epoch milliseconds of a date or datetime (naive values are in the reference zone)."
    val = todate(val)
    delta = val - EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def parse(text: str) -> datetime:
    "Parse calendar text (or an epoch millisecond string) into a datetime."
    text = text.strip()
    if R_MILLIS.match(text):
        return frommillis(int(text))

    for fmt in DATE_FMTS:
        try:
            return _zoned(datetime.strptime(text, fmt))
        except ValueError:
            continue

    # Last resort: ISO 8601 with offsets.
    return _zoned(datetime.fromisoformat(text))


def todate(val: Any) -> datetime:
    """
    Convert epoch milliseconds, date text or a date into an aware datetime.
    Raises ValueError or TypeError if the value cannot be read as a date.
    """
    if isinstance(val, datetime):
        return _zoned(val)
    if isinstance(val, date):
        return _zoned(datetime.combine(val, time()))
    if isinstance(val, bool):
        raise TypeError(f"Not a date: {val!r}")
    if isinstance(val, (int, float)):
        return frommillis(val)
    if isinstance(val, str):
        return parse(val)
    if hasattr(val, 'item'):
        # numpy scalar
        return todate(val.item())
    raise TypeError(f"Not a date: {val!r}")


def astext(val: Any, fmt: str = DATE_FMT) -> str:
    "Calendar text of a date-like value, in the reference zone."
    if isinstance(val, time):
        return val.strftime('%H:%M:%S')
    if isinstance(val, date) and not isinstance(val, datetime) and fmt == DATE_FMT:
        return val.strftime('%Y-%m-%d')
    return todate(val).astimezone(DATE_ZONE).strftime(fmt)


def _zoned(val: datetime) -> datetime:
    if val.tzinfo is None:
        return val.replace(tzinfo=DATE_ZONE)
    return val


__all__ = [
    'DATE_FMT',
    'DATE_ZONE',
    'astext',
    'frommillis',
    'parse',
    'todate',
    'tomillis',
]
