"""
Recursive descent parser for SAM formatted text.

Each grammar rule is a Parser method. Rules consume text from Parser.index and either return a value or signal a
failure that the enclosing rule may recover from by rewinding (optional and repeat). The furthest failure is
remembered so that a failed parse can report where it got stuck and what it expected to find there.

Grammar:
    sam_file      = header alignment_line* END
    header        = hd_line? sq_line* rg_line* pg_line* co_line* user_line*
    hd_line       = "@HD" (TAB fields)? line_end          (likewise @SQ, @RG, @PG)
    co_line       = "@CO" TAB until_newline line_end
    user_line     = "@" lower lower (TAB fields)? line_end
    fields        = (field_pair (TAB field_pair)*)?
    field_pair    = TAG ":" until_tab
    alignment     = QNAME TAB FLAG TAB RNAME TAB POS TAB MAPQ TAB cigar TAB RNEXT TAB PNEXT TAB TLEN TAB SEQ TAB QUAL
                    (TAB optional_tag)*
    cigar         = "*" | (integer op)+
    optional_tag  = TAG ":" type ":" until_tab
    line_end      = newline | END
"""

import re
import warnings
from functools import wraps

from .cigar import CigarOperation
from .header import Header
from .record import Alignment, SamFile
from .tag import OptionalTag
from .util import DuplicateTagWarning, INT32_MAX, INT32_MIN, ParseError, UINT16_MAX, UINT8_MAX, duplicate_tag_policy, line_column

NEWLINE_RE = re.compile(r"\r\n|\n|\r")
FIELD_RE = re.compile(r"[^\t\n\r]+")
UNTIL_TAB_RE = re.compile(r"[^\t\n\r]*")
UNTIL_NEWLINE_RE = re.compile(r"[^\n\r]*")
INTEGER_RE = re.compile(r"[0-9]+")
SIGNED_INTEGER_RE = re.compile(r"-?[0-9]+")
TAG_RE = re.compile(r"[^:\t\n\r]+")
CIGAR_OP_RE = re.compile(r"[MIDNSHP=X]")
TAG_TYPE_RE = re.compile(r"[AifZHB]")


class _Backtrack(Exception):
    """
    Raised by a rule that did not match. Never escapes Parser.parse().
    """
    pass


def rule(name):
    """
    Name a grammar rule so failures inside it report it in their trace.
    :param name: Human readable rule name.
    """
    def decorator(method):
        @wraps(method)
        def wrapper(self, *args):
            self._stack.append(name)
            try:
                return method(self, *args)
            finally:
                self._stack.pop()
        return wrapper
    return decorator


class Parser:
    """
    Holds the state of one parse. Instances are not shared between threads or reused between inputs.
    """
    __slots__ = 'text', 'index', 'duplicate_tags', 'line_offset', '_length', '_furthest', '_expected', '_trace', '_stack'

    def __init__(self, text, duplicate_tags=None, line_offset=0):
        """
        Constructor.
        :param text: SAM formatted str, or bytes which will be decoded as UTF-8.
        :param duplicate_tags: How to resolve a tag repeated within a header line, see util.DUPLICATE_TAG_POLICIES.
        :param line_offset: Number of lines preceding text in its source, used when reporting errors.
        """
        if isinstance(text, (bytes, bytearray)):
            try:
                text = text.decode('utf-8')
            except UnicodeDecodeError as e:
                # Report against the decodable prefix so line and column match what a reader would see
                index = len(text[:e.start].decode('utf-8'))
                raise ParseError(text.decode('utf-8', errors='replace'), index, ("UTF-8 text",),
                                 line_offset=line_offset) from e
        self.text = text
        self.index = 0
        self.duplicate_tags = duplicate_tag_policy(duplicate_tags)
        self.line_offset = line_offset
        self._length = len(text)
        self._furthest = -1
        self._expected = []
        self._trace = ()
        self._stack = []

    def parse(self, start):
        """
        Apply a rule to the entire text.
        :param start: Unbound Parser rule method, for example Parser.sam_file.
        :return: The value produced by the rule.
        """
        try:
            result = start(self)
            self.end()
        except _Backtrack:
            raise ParseError(self.text, max(self._furthest, 0), self._expected, self._trace, self.line_offset) from None
        return result

    # --- Failure bookkeeping ---
    def fail(self, expected, index=None):
        """
        Record a failed expectation and backtrack.
        :param expected: Name of the grammar element that did not match.
        :param index: Offset of the failure, defaults to the current position.
        """
        index = self.index if index is None else index
        if index > self._furthest:
            self._furthest = index
            self._expected = [expected]
            self._trace = tuple(self._stack)
        elif index == self._furthest and expected not in self._expected:
            self._expected.append(expected)
        raise _Backtrack()

    def cut(self, expected, index):
        """
        Fail without the possibility of backtracking. Used once the input can no longer match any alternative.
        """
        raise ParseError(self.text, index, (expected,), self._stack, self.line_offset)

    # --- Combinators ---
    def optional(self, func, *args):
        start = self.index
        try:
            return func(*args)
        except _Backtrack:
            self.index = start
            return None

    def repeat(self, func, *args) -> list:
        results = []
        while True:
            start = self.index
            try:
                results.append(func(*args))
            except _Backtrack:
                self.index = start
                return results
            if self.index == start:
                return results

    # --- Lexical primitives ---
    def at_end(self) -> bool:
        return self.index >= self._length

    def end(self):
        if not self.at_end():
            self.fail('end of input')

    def match(self, pattern, expected) -> str:
        m = pattern.match(self.text, self.index)
        if m is None:
            self.fail(expected)
        self.index = m.end()
        return m.group()

    def literal(self, value, expected=None) -> str:
        if not self.text.startswith(value, self.index):
            self.fail(expected or '"{}"'.format(value))
        self.index += len(value)
        return value

    def tab(self):
        self.literal('\t', 'tab')

    def newline(self) -> str:
        return self.match(NEWLINE_RE, 'newline')

    def line_end(self):
        if not self.at_end():
            self.newline()

    def field(self, name='field') -> str:
        return self.match(FIELD_RE, name)

    def until_tab(self) -> str:
        return self.match(UNTIL_TAB_RE, 'text')

    def until_newline(self) -> str:
        return self.match(UNTIL_NEWLINE_RE, 'text')

    def integer(self, name='integer', maximum=INT32_MAX) -> int:
        start = self.index
        digits = self.match(INTEGER_RE, name)
        value = int(digits) if len(digits) <= 20 else maximum + 1
        if value > maximum:
            self.cut('{} no greater than {}'.format(name, maximum), start)
        return value

    def signed_integer(self, name='signed integer', minimum=INT32_MIN, maximum=INT32_MAX) -> int:
        start = self.index
        digits = self.match(SIGNED_INTEGER_RE, name)
        value = int(digits) if len(digits) <= 21 else maximum + 1
        if not minimum <= value <= maximum:
            self.cut('{} between {} and {}'.format(name, minimum, maximum), start)
        return value

    def two_char_tag(self, name) -> str:
        start = self.index
        tag = self.match(TAG_RE, name)
        if len(tag) != 2:
            self.fail('two character ' + name, start)
        return tag

    # --- Header rules ---
    @rule('header field')
    def header_field(self):
        tag = self.two_char_tag('header field tag')
        self.literal(':')
        return tag, self.until_tab()

    def _tab_header_field(self):
        self.tab()
        return self.header_field()

    def header_fields(self) -> dict:
        """
        Zero or more tab separated TAG:VALUE fields collected into a dict in the order read.
        """
        fields = {}
        start = self.index
        pair = self.optional(self.header_field)
        while pair is not None:
            self._add_field(fields, pair, start)
            start = self.index + 1
            pair = self.optional(self._tab_header_field)
        return fields

    def _add_field(self, fields, pair, index):
        tag, value = pair
        if tag in fields:
            if self.duplicate_tags == 'error':
                self.cut('header field tag not already present on the line', index)
            line, column = line_column(self.text, index)
            warnings.warn("Header field tag {} repeated at {}:{}, keeping the {} value.".format(
                tag, line + self.line_offset, column, self.duplicate_tags), DuplicateTagWarning)
            if self.duplicate_tags == 'first':
                return
        fields[tag] = value

    def _tab_header_fields(self):
        self.tab()
        return self.header_fields()

    def _fields_line(self, name):
        self.literal('@' + name)
        fields = self.optional(self._tab_header_fields)
        self.line_end()
        return {} if fields is None else fields

    @rule('@HD line')
    def hd_line(self) -> dict:
        return self._fields_line('HD')

    @rule('@SQ line')
    def sq_line(self) -> dict:
        return self._fields_line('SQ')

    @rule('@RG line')
    def rg_line(self) -> dict:
        return self._fields_line('RG')

    @rule('@PG line')
    def pg_line(self) -> dict:
        return self._fields_line('PG')

    @rule('@CO line')
    def co_line(self) -> str:
        self.literal('@CO')
        self.tab()
        comment = self.until_newline()
        self.line_end()
        return comment

    @rule('user defined header line')
    def user_header_line(self):
        self.literal('@')
        start = self.index
        tag = self.text[start:start + 2]
        if len(tag) != 2 or not tag.isalpha() or not tag.islower():
            self.fail('lowercase user defined header tag', start)
        self.index += 2
        fields = self.optional(self._tab_header_fields)
        self.line_end()
        return tag, {} if fields is None else fields

    @rule('header')
    def header(self) -> Header:
        hd = self.optional(self.hd_line)
        sq = self.repeat(self.sq_line)
        rg = self.repeat(self.rg_line)
        pg = self.repeat(self.pg_line)
        co = self.repeat(self.co_line)
        user_records = {}
        for tag, fields in self.repeat(self.user_header_line):
            user_records.setdefault(tag, []).append(fields)
        return Header(hd, sq, rg, pg, co, user_records)

    # --- Alignment rules ---
    def cigar_operation(self) -> CigarOperation:
        length = self.integer('CIGAR operation length')
        return CigarOperation(length, self.match(CIGAR_OP_RE, 'CIGAR operation (one of MIDNSHP=X)'))

    @rule('CIGAR')
    def cigar(self) -> tuple:
        if self.optional(self.literal, '*') is not None:
            return ()
        ops = [self.cigar_operation()]
        ops.extend(self.repeat(self.cigar_operation))
        return tuple(ops)

    @rule('optional tag')
    def optional_tag(self) -> OptionalTag:
        tag = self.two_char_tag('tag name')
        self.literal(':')
        tag_type = self.match(TAG_TYPE_RE, 'tag type (one of AifZHB)')
        self.literal(':')
        return OptionalTag(tag, tag_type, self.until_tab())

    def _tab_optional_tag(self):
        self.tab()
        return self.optional_tag()

    @rule('alignment')
    def alignment(self) -> Alignment:
        qname = self.field('QNAME')
        self.tab()
        flag = self.integer('FLAG', UINT16_MAX)
        self.tab()
        rname = self.field('RNAME')
        self.tab()
        pos = self.integer('POS')
        self.tab()
        mapq = self.integer('MAPQ', UINT8_MAX)
        self.tab()
        cigar = self.cigar()
        self.tab()
        rnext = self.field('RNEXT')
        self.tab()
        pnext = self.signed_integer('PNEXT')
        self.tab()
        tlen = self.signed_integer('TLEN')
        self.tab()
        seq = self.field('SEQ')
        self.tab()
        qual = self.field('QUAL')
        tags = self.repeat(self._tab_optional_tag)
        return Alignment(qname, flag, rname, pos, mapq, cigar, rnext, pnext, tlen, seq, qual, tags)

    def alignment_line(self) -> Alignment:
        alignment = self.alignment()
        self.line_end()
        return alignment

    @rule('SAM file')
    def sam_file(self) -> SamFile:
        header = self.header()
        alignments = []
        while not self.at_end():
            alignments.append(self.alignment_line())
        return SamFile(header, alignments)


def parse_sam_file(text, duplicate_tags=None) -> SamFile:
    """
    Parse a complete SAM file.
    :param text: SAM formatted text, header followed by alignments.
    :param duplicate_tags: Overrides the SAMPY_DUPLICATE_TAGS policy for this call.
    :return: SamFile instance.
    :raises ParseError: If the text does not match the SAM grammar up to its end.
    """
    return Parser(text, duplicate_tags).parse(Parser.sam_file)


def parse_header(text, duplicate_tags=None) -> Header:
    """
    Parse a SAM header section.
    The text must consist only of header lines, see reader.read_header() to extract them from a file.
    :param text: SAM formatted header lines.
    :param duplicate_tags: Overrides the SAMPY_DUPLICATE_TAGS policy for this call.
    :return: Header instance.
    """
    return Parser(text, duplicate_tags).parse(Parser.header)


def parse_alignment(text) -> Alignment:
    """
    Parse a single alignment line. A trailing line terminator is accepted.
    :param text: SAM formatted alignment record.
    :return: Alignment instance.
    """
    return Parser(text).parse(Parser.alignment_line)


def parse_cigar(text) -> tuple:
    """
    Parse a CIGAR string.
    :param text: CIGAR string, for example "10M5I2D" or "*".
    :return: Tuple of CigarOperation, empty for "*".
    """
    return Parser(text).parse(Parser.cigar)


def parse_optional_tag(text) -> OptionalTag:
    """
    Parse a single TAG:TYPE:VALUE optional field.
    """
    return Parser(text).parse(Parser.optional_tag)
