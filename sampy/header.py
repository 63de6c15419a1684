"""
SAM header representation.

Every header line except @CO is held as a dict mapping two character field tags to string values.
Dicts keep insertion order so fields are written back in the order they were read.
"""

from collections import namedtuple
from enum import Enum

from .util import FILE_FORMAT_VERSION


class SortingOrder(Enum):
    """Values of the @HD SO field."""
    UNKNOWN = 'unknown'
    UNSORTED = 'unsorted'
    QUERYNAME = 'queryname'
    COORDINATE = 'coordinate'


class GroupingOrder(Enum):
    """Values of the @HD GO field."""
    NONE = 'none'
    QUERY = 'query'
    REFERENCE = 'reference'


class Header(namedtuple('Header', 'hd sq rg pg co user_records')):
    """
    Represents the header section of a SAM file.
    :ivar hd: Dict of @HD fields or None if the header has no @HD line.
    :ivar sq: Tuple of dicts, one per @SQ line in file order.
    :ivar rg: Tuple of dicts, one per @RG line in file order.
    :ivar pg: Tuple of dicts, one per @PG line in file order.
    :ivar co: Tuple of @CO comment strings in file order.
    :ivar user_records: Dict mapping lowercase user defined line tags to tuples of field dicts.
    """
    __slots__ = ()

    def __new__(cls, hd=None, sq=(), rg=(), pg=(), co=(), user_records=None):
        user_records = {tag: tuple(lines) for tag, lines in (user_records or {}).items()}
        # A tag without lines has no text form
        return super().__new__(cls, hd, tuple(sq), tuple(rg), tuple(pg), tuple(co),
                               {tag: lines for tag, lines in user_records.items() if lines})

    @property
    def sorting_order(self) -> SortingOrder:
        return get_sorting_order(self)

    @property
    def grouping_order(self) -> GroupingOrder:
        return get_grouping_order(self)


def ensure_hd(header: Header) -> Header:
    """
    Ensures that an @HD line is present in the header.
    :param header: Header to check.
    :return: header unchanged if it has an @HD line, otherwise a copy with @HD VN set to FILE_FORMAT_VERSION.
    """
    if header.hd is not None:
        return header
    return header._replace(hd={'VN': FILE_FORMAT_VERSION})


def get_sorting_order(header: Header) -> SortingOrder:
    """
    Look up the sorting order declared in the @HD SO field.
    Missing or unrecognised values are reported as SortingOrder.UNKNOWN.
    """
    try:
        return SortingOrder(header.hd['SO'])
    except (TypeError, KeyError, ValueError):
        return SortingOrder.UNKNOWN


def get_grouping_order(header: Header) -> GroupingOrder:
    """
    Look up the grouping order declared in the @HD GO field.
    Missing or unrecognised values are reported as GroupingOrder.NONE.
    """
    try:
        return GroupingOrder(header.hd['GO'])
    except (TypeError, KeyError, ValueError):
        return GroupingOrder.NONE


def references(header: Header) -> list:
    """
    List the reference sequences declared by @SQ lines.
    :param header: Header to read.
    :return: List of (name, length) tuples in @SQ order. Length is None if LN is absent or not an integer.
    """
    refs = []
    for sq in header.sq:
        length = sq.get('LN')
        refs.append((sq.get('SN'), int(length) if length and length.isdigit() else None))
    return refs
