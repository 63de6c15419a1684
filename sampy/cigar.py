from collections import namedtuple
from enum import IntEnum

from .util import InvalidSAM

OP_CODES = tuple("MIDNSHP=X")
"""tuple: CIGAR operation characters indexed by their numeric op codes."""


class CigarOps(IntEnum):
    """Enum of numeric CIGAR operations."""
    MATCH = 0 # M
    INS = 1 # I
    DEL = 2 # D
    REF_SKIP = 3 # N
    SOFT_CLIP = 4 # S
    HARD_CLIP = 5 # H
    PAD = 6 # P
    EQUAL = 7 # =
    DIFF = 8 # X


CONSUMES_QUERY = (
    True,  # M
    True,  # I
    False,  # D
    False,  # N
    True,  # S
    False,  # H
    False,  # P
    True,  # =
    True,  # X
)
"""tuple: Boolean values ordered by op code indicating if op consumes a query sequence position."""

CONSUMES_REFERENCE = (
    True,  # M
    False,  # I
    True,  # D
    True,  # N
    False,  # S
    False,  # H
    False,  # P
    True,  # =
    True,  # X
)
"""tuple: Boolean values ordered by op code indicating if op consumes a reference position."""

CLIPPED = (
    False,  # M
    False,  # I
    False,  # D
    False,  # N
    True,  # S
    True,  # H
    False,  # P
    False,  # =
    False,  # X
)
"""tuple: Boolean values ordered by op code indicating if op is soft or hard clip."""


class CigarOperation(namedtuple('CigarOperation', 'length op')):
    """
    A single CIGAR operation, for example (10, 'M') for 10M.
    """
    __slots__ = ()

    def __new__(cls, length: int, op: str):
        if op not in OP_CODES:
            raise InvalidSAM("Unknown CIGAR operation {!r}.".format(op))
        if length < 0:
            raise InvalidSAM("CIGAR operation length can not be negative.")
        return super().__new__(cls, length, op)

    @property
    def code(self) -> CigarOps:
        return CigarOps(OP_CODES.index(self.op))

    @property
    def consumes_query(self) -> bool:
        return CONSUMES_QUERY[self.code]

    @property
    def consumes_reference(self) -> bool:
        return CONSUMES_REFERENCE[self.code]

    @property
    def clipped(self) -> bool:
        return CLIPPED[self.code]

    def __str__(self):
        return "{}{}".format(self.length, self.op)


def alignment_length(cigar):
    """
    Count number of reference consuming positions that CIGAR represents.
    :param cigar: Iterable of CigarOperation.
    :return: Total alignment length of CIGAR.
    """
    total = 0
    for op in cigar:
        if op.consumes_reference:
            total += op.length
    return total


def query_length(cigar):
    """
    Count number of query sequence positions that CIGAR represents.
    :param cigar: Iterable of CigarOperation.
    :return: Length of the query sequence the CIGAR describes, soft clips included.
    """
    return sum(op.length for op in cigar if op.consumes_query)
