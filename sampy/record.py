from collections import namedtuple
from enum import IntFlag

from .header import Header


class RecordFlags(IntFlag):
    """
    Represents flag bit values. Can be OR'd (|) together or AND (&) to determine flag setting.
    """
    PAIRED = 1 << 0  # template having multiple segments in sequencing
    PROPER_PAIR = 1 << 1  # each segment properly aligned according to the aligner
    UNMAPPED = 1 << 2  # segment unmapped
    MATE_UNMAPPED = 1 << 3  # next segment in the template unmapped
    REVERSE = 1 << 4  # SEQ being reverse complemented
    MATE_REVERSE = 1 << 5  # SEQ of the next segment in the template being reversed
    READ1 = 1 << 6  # the first segment in the template
    READ2 = 1 << 7  # the last segment in the template
    SECONDARY = 1 << 8  # secondary alignment
    QCFAIL = 1 << 9  # not passing quality controls
    DUPLICATE = 1 << 10  # PCR or optical duplicate
    SUPPLEMENTARY = 1 << 11  # supplementary alignment


_ALIGNMENT_FIELDS = 'qname flag rname pos mapq cigar rnext pnext tlen seq qual tags'


class Alignment(namedtuple('Alignment', _ALIGNMENT_FIELDS)):
    """
    Represents one line of the alignment section.
    The eleven mandatory SAM fields are kept as read, cigar is a tuple of CigarOperation and tags a tuple of OptionalTag.
    """
    __slots__ = ()

    def __new__(cls, qname, flag, rname, pos, mapq, cigar, rnext, pnext, tlen, seq, qual, tags=()):
        return super().__new__(cls, qname, flag, rname, pos, mapq, tuple(cigar), rnext, pnext, tlen, seq, qual, tuple(tags))

    @property
    def flags(self) -> RecordFlags:
        return RecordFlags(self.flag)

    def has_flag(self, mask) -> bool:
        return has_flag(self, mask)

    def get_tag(self, name):
        """
        Find an optional tag by name.
        :param name: Two character tag name.
        :return: The first OptionalTag with that name.
        """
        for tag in self.tags:
            if tag.tag == name:
                return tag
        else:
            raise KeyError("{} tag not defined.".format(name))


def has_flag(alignment: Alignment, mask) -> bool:
    """
    Test flag bits.
    :param alignment: Alignment to test.
    :param mask: RecordFlags member or int bit mask.
    :return: True if any bit of mask is set in the alignment flag.
    """
    return (alignment.flag & mask) != 0


class SamFile(namedtuple('SamFile', 'header alignments')):
    """
    A complete SAM file: header followed by the alignment records in file order.
    """
    __slots__ = ()

    def __new__(cls, header=None, alignments=()):
        return super().__new__(cls, Header() if header is None else header, tuple(alignments))
