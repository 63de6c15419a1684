"""
Python implementation of a SAM (Sequence Alignment/Map) text format parser and serializer.

Classes:
    SamFile: A parsed SAM file, its Header and list of Alignment records.
    Header: The header section, @HD/@SQ/@RG/@PG field dicts, @CO comments and user defined lines.
    Alignment: Represents one alignment record in memory.
    CigarOperation: A single (length, op) CIGAR operation.
    OptionalTag: A TAG:TYPE:VALUE optional record field.
    RecordFlags: Flag bit values.
    Reader: Convenience interface for reading alignment records one at a time.
    Writer: Convenience interface for writing alignment records.

Functions:
    parse_sam_file, parse_header, parse_alignment: Parse SAM text, raising ParseError on malformed input.
    format_sam_file, format_header, format_alignment: Convert parsed data back to SAM text.
    read_sam_file, read_header, write_sam_file: File level helpers.
    has_flag: Test alignment flag bits.

Constants:
    OP_CODES (tuple): CIGAR operation characters indexed by their numeric op codes.
    TAG_TYPES (tuple): Optional tag value type characters.
    FILE_FORMAT_VERSION (str): Default @HD VN value.

Configuration:
    SAMPY_DUPLICATE_TAGS environment variable: 'last' (default), 'first' or 'error'.
    Controls how a tag repeated within one header line is resolved.

Example 1:
    from sampy import read_sam_file, has_flag, RecordFlags
    sam_file = read_sam_file("data.sam")

    for alignment in sam_file.alignments:
        if not has_flag(alignment, RecordFlags.UNMAPPED):
            ***Your logic here***

Example 2:
    from sampy import Reader, Writer

    with open("data.sam") as stream_in, open("copy.sam", "w") as stream_out:
        reader = Reader(stream_in)
        writer = Writer(stream_out, reader.header)
        for alignment in reader:
            writer(alignment)

For more:
    >> help(sampy.parser) for the grammar and error reporting.
    >> help(sampy.formatter) for converting back to SAM text.
    >> help(sampy.header) for header queries such as get_sorting_order().
    >> help(sampy.util) for exceptions and configuration.
"""

from .__version import __version__
from .cigar import CigarOperation, CigarOps, OP_CODES, alignment_length, query_length
from .formatter import format_alignment, format_cigar, format_header, format_sam_file, format_tag
from .header import GroupingOrder, Header, SortingOrder, ensure_hd, get_grouping_order, get_sorting_order, references
from .parser import parse_alignment, parse_cigar, parse_header, parse_optional_tag, parse_sam_file
from .reader import Reader, read_header, read_sam_file
from .record import Alignment, RecordFlags, SamFile, has_flag
from .tag import OptionalTag, TAG_TYPES
from .util import DuplicateTagWarning, FILE_FORMAT_VERSION, InvalidSAM, ParseError, SAMFileError
from .writer import Writer, write_sam_file
