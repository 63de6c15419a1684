"""
Human readable summaries of parsed SAM data, used by tools/view.py.
"""

from .formatter import format_cigar, format_tag
from .record import RecordFlags, has_flag

FLAG_NAMES = (
    (RecordFlags.PAIRED, 'paired'),
    (RecordFlags.PROPER_PAIR, 'proper_pair'),
    (RecordFlags.UNMAPPED, 'unmapped'),
    (RecordFlags.MATE_UNMAPPED, 'mate_unmapped'),
    (RecordFlags.REVERSE, 'reverse'),
    (RecordFlags.MATE_REVERSE, 'mate_reverse'),
    (RecordFlags.READ1, 'first'),
    (RecordFlags.READ2, 'second'),
    (RecordFlags.SECONDARY, 'secondary'),
    (RecordFlags.QCFAIL, 'qc_fail'),
    (RecordFlags.DUPLICATE, 'duplicate'),
    (RecordFlags.SUPPLEMENTARY, 'supplementary'),
)
"""tuple: (flag, description) pairs in bit order."""


def describe_flag_bits(flag) -> str:
    """
    Describe the flag bits that are set.
    :param flag: int or RecordFlags value.
    :return: Comma separated flag names, or "none".
    """
    names = [name for bit, name in FLAG_NAMES if flag & bit]
    return ", ".join(names) if names else "none"


def count_alignments(alignments) -> dict:
    """
    Count alignments by their flag bits.
    :param alignments: Iterable of Alignment.
    :return: Dict with total, mapped, unmapped, paired and reverse counts.
    """
    counts = dict.fromkeys(('total', 'mapped', 'unmapped', 'paired', 'reverse'), 0)
    for alignment in alignments:
        counts['total'] += 1
        if has_flag(alignment, RecordFlags.UNMAPPED):
            counts['unmapped'] += 1
        else:
            counts['mapped'] += 1
        if has_flag(alignment, RecordFlags.PAIRED):
            counts['paired'] += 1
        if has_flag(alignment, RecordFlags.REVERSE):
            counts['reverse'] += 1
    return counts


def summarize_header(header, limit=5):
    """
    Generate summary lines for a Header.
    :param header: Header instance.
    :param limit: Maximum number of @SQ lines and comments listed individually.
    :return: Generator of str lines.
    """
    if header.hd is None:
        yield "No @HD line present"
    else:
        yield "@HD line:"
        for tag, value in header.hd.items():
            yield "  {}: {}".format(tag, value)
    if header.sq:
        yield "@SQ lines ({} reference sequences):".format(len(header.sq))
        for sq in header.sq[:limit]:
            yield "  {} (length: {})".format(sq.get('SN', '?'), sq.get('LN', '?'))
        if len(header.sq) > limit:
            yield "  ... and {} more".format(len(header.sq) - limit)
    if header.rg:
        yield "@RG lines ({} read groups):".format(len(header.rg))
        for rg in header.rg:
            yield "  ID: {}".format(rg.get('ID', '?'))
    if header.pg:
        yield "@PG lines ({} programs):".format(len(header.pg))
        for pg in header.pg:
            yield "  ID: {}{}".format(pg.get('ID', '?'), " (PN: {})".format(pg['PN']) if 'PN' in pg else "")
    if header.co:
        yield "@CO lines ({} comments):".format(len(header.co))
        for comment in header.co[:limit]:
            yield "  " + comment
        if len(header.co) > limit:
            yield "  ... and {} more".format(len(header.co) - limit)
    for tag, records in header.user_records.items():
        yield "@{} lines ({} user defined records)".format(tag, len(records))


def summarize_alignment(alignment):
    """
    Generate description lines for one Alignment.
    """
    yield "QNAME: {}".format(alignment.qname)
    yield "FLAG: {} ({})".format(int(alignment.flag), describe_flag_bits(alignment.flag))
    yield "RNAME: {}".format(alignment.rname)
    yield "POS: {}".format(alignment.pos)
    yield "MAPQ: {}".format(alignment.mapq)
    yield "CIGAR: {}".format(format_cigar(alignment.cigar))
    yield "SEQ length: {}".format(len(alignment.seq))
    if alignment.tags:
        yield "Tags: {}".format(", ".join(format_tag(tag) for tag in alignment.tags))


def summarize(sam_file, alignments=0):
    """
    Generate a full report for a SamFile.
    :param sam_file: SamFile instance.
    :param alignments: Number of leading alignments to describe individually.
    :return: Generator of str lines.
    """
    yield "HEADER INFORMATION:"
    yield from summarize_header(sam_file.header)
    yield ""
    yield "ALIGNMENT STATISTICS:"
    counts = count_alignments(sam_file.alignments)
    yield "Total alignments: {}".format(counts['total'])
    yield "Mapped: {}".format(counts['mapped'])
    yield "Unmapped: {}".format(counts['unmapped'])
    yield "Paired reads: {}".format(counts['paired'])
    yield "Reverse strand: {}".format(counts['reverse'])
    for i, alignment in enumerate(sam_file.alignments[:alignments], 1):
        yield ""
        yield "Alignment {}:".format(i)
        for line in summarize_alignment(alignment):
            yield "  " + line
