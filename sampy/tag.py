from collections import namedtuple

from .util import InvalidSAM

TAG_TYPES = tuple("AifZHB")
"""tuple: Optional tag value type characters allowed in SAM text."""


class OptionalTag(namedtuple('OptionalTag', 'tag tag_type value')):
    """
    Represents an optional record tag of the form TAG:TYPE:VALUE.
    The value is kept as the literal text following the type, no decoding is done based on tag_type.
    """
    __slots__ = ()

    def __new__(cls, tag: str, tag_type: str, value: str = ''):
        if len(tag) != 2:
            raise InvalidSAM("Tag name must be exactly two characters, got {!r}.".format(tag))
        if tag_type not in TAG_TYPES:
            raise InvalidSAM("Unknown tag type {!r}.".format(tag_type))
        return super().__new__(cls, tag, tag_type, value)

    def __str__(self):
        return "{}:{}:{}".format(*self)
