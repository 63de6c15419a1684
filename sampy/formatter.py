"""
Convert Header, Alignment and SamFile instances to SAM formatted text.
Output always uses "\\n" line terminators. Field and tag order follow the order held by the data model.
"""

HEADER_TAGS = ('HD', 'SQ', 'RG', 'PG')


def format_cigar(cigar) -> str:
    """
    Convert CIGAR operations to a CIGAR string.
    :param cigar: Iterable of CigarOperation.
    :return: Concatenated operations, or "*" if there are none.
    """
    return "".join("{}{}".format(length, op) for length, op in cigar) or "*"


def format_tag(tag) -> str:
    return "{}:{}:{}".format(tag.tag, tag.tag_type, tag.value)


def format_header_line(name, fields) -> str:
    """
    Convert one header line to SAM format, without a line terminator.
    :param name: Two character line tag without the leading @, for example "SQ".
    :param fields: Dict of field tag to value.
    :return: str of the form @XX<TAB>TAG:VALUE...
    """
    return "@" + name + "".join("\t{}:{}".format(tag, value) for tag, value in fields.items())


def header_lines(header):
    """
    Generate the SAM header lines of header in output order: @HD, @SQ, @RG, @PG, @CO, then user defined lines.
    :param header: Header instance.
    :return: Generator of str, one per line, without line terminators.
    """
    if header.hd is not None:
        yield format_header_line('HD', header.hd)
    for name, lines in zip(HEADER_TAGS[1:], (header.sq, header.rg, header.pg)):
        for fields in lines:
            yield format_header_line(name, fields)
    for comment in header.co:
        yield "@CO\t" + comment
    for name, lines in header.user_records.items():
        for fields in lines:
            yield format_header_line(name, fields)


def format_header(header) -> str:
    """
    Convert a Header to SAM format.
    :param header: Header instance.
    :return: str containing every header line, each terminated by a newline.
    """
    return "".join(line + "\n" for line in header_lines(header))


def format_alignment(alignment) -> str:
    """
    Convert an Alignment to a SAM formatted line without a line terminator.
    :param alignment: Alignment instance.
    :return: str of the eleven mandatory fields followed by the optional tags, tab separated.
    """
    fields = [
        alignment.qname,
        str(int(alignment.flag)),
        alignment.rname,
        str(alignment.pos),
        str(alignment.mapq),
        format_cigar(alignment.cigar),
        alignment.rnext,
        str(alignment.pnext),
        str(alignment.tlen),
        alignment.seq,
        alignment.qual,
    ]
    fields.extend(format_tag(tag) for tag in alignment.tags)
    return "\t".join(fields)


def format_sam_file(sam_file) -> str:
    """
    Convert a SamFile to SAM formatted text. Every line, including the last, is newline terminated.
    :param sam_file: SamFile instance.
    :return: str containing the complete file.
    """
    return format_header(sam_file.header) + "".join(format_alignment(alignment) + "\n" for alignment in sam_file.alignments)
