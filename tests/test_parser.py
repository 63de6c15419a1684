from unittest import TestCase, mock
import warnings

import sampy.util
from sampy import Alignment, CigarOperation, DuplicateTagWarning, Header, OptionalTag, ParseError, SortingOrder, \
    get_sorting_order, parse_alignment, parse_cigar, parse_header, parse_optional_tag, parse_sam_file

from .data import ALIGNMENTS, HEADER, MINIMAL_ALIGNMENT, SAM


class TestParseAlignment(TestCase):
    def test_minimal(self):
        alignment = parse_alignment(MINIMAL_ALIGNMENT)
        self.assertEqual(alignment, Alignment("read1", 4, "*", 0, 0, (), "*", 0, 0, "ACGT", "****", ()))
        self.assertEqual(alignment.cigar, (), "* CIGAR should be empty")
        self.assertEqual(alignment.tags, ())

    def test_trailing_newline(self):
        for terminator in ("\n", "\r\n", "\r"):
            self.assertEqual(parse_alignment(MINIMAL_ALIGNMENT + terminator), parse_alignment(MINIMAL_ALIGNMENT))

    def test_fields(self):
        alignment = parse_alignment(ALIGNMENTS.splitlines()[-1])
        self.assertEqual(alignment.qname, "r001")
        self.assertEqual(alignment.flag, 147)
        self.assertEqual(alignment.rname, "ref")
        self.assertEqual(alignment.pos, 37)
        self.assertEqual(alignment.mapq, 30)
        self.assertEqual(alignment.cigar, (CigarOperation(9, 'M'),))
        self.assertEqual(alignment.rnext, "=")
        self.assertEqual(alignment.pnext, 7)
        self.assertEqual(alignment.tlen, -39)
        self.assertEqual(alignment.seq, "CAGCGGCAT")
        self.assertEqual(alignment.qual, "*")
        self.assertEqual(alignment.tags, (OptionalTag("NM", "i", "1"), OptionalTag("MD", "Z", "9")), "Tag order must be preserved")

    def test_tag_values_are_not_decoded(self):
        alignment = parse_alignment(MINIMAL_ALIGNMENT + "\tXA:Z:a:b:c\tXB:B:c,1,2\tXE:Z:\tXF:f:not-a-float")
        self.assertEqual([tag.value for tag in alignment.tags], ["a:b:c", "c,1,2", "", "not-a-float"])

    def test_too_few_fields(self):
        with self.assertRaises(ParseError):
            parse_alignment("read1\t4\t*\t0\t0\t*\t*\t0\t0\tACGT")

    def test_non_numeric_flag(self):
        with self.assertRaises(ParseError) as cm:
            parse_alignment("read1\tabc\t*\t0\t0\t*\t*\t0\t0\tACGT\t****")
        e = cm.exception
        self.assertEqual((e.line, e.column), (1, 7))
        self.assertEqual(e.expected, ('FLAG',))
        self.assertEqual(e.trace, ('alignment',))

    def test_negative_position_rejected(self):
        with self.assertRaises(ParseError) as cm:
            parse_alignment("read1\t0\tref\t-1\t0\t*\t*\t0\t0\tACGT\t****")
        self.assertIn('POS', cm.exception.expected)

    def test_integer_overflow(self):
        with self.assertRaises(ParseError) as cm:
            parse_alignment("read1\t70000\t*\t0\t0\t*\t*\t0\t0\tACGT\t****")
        self.assertEqual(cm.exception.expected, ('FLAG no greater than 65535',))
        self.assertEqual(cm.exception.column, 7)

        with self.assertRaises(ParseError):
            parse_alignment("read1\t0\t*\t0\t256\t*\t*\t0\t0\tACGT\t****")
        with self.assertRaises(ParseError):
            parse_alignment("read1\t0\t*\t0\t0\t*\t*\t0\t-99999999999999999999999\tACGT\t****")

    def test_malformed_cigar(self):
        with self.assertRaises(ParseError):
            parse_alignment("read1\t0\tref\t1\t0\t10Q\t*\t0\t0\tACGT\t****")
        with self.assertRaises(ParseError):
            parse_alignment("read1\t0\tref\t1\t0\tM\t*\t0\t0\tACGT\t****")

    def test_malformed_tag(self):
        for tag in ("NMX:i:1", "NM:q:1", "NM:i", "N:i:1"):
            with self.assertRaises(ParseError, msg=tag):
                parse_alignment(MINIMAL_ALIGNMENT + "\t" + tag)

    def test_multiple_lines_rejected(self):
        with self.assertRaises(ParseError):
            parse_alignment(MINIMAL_ALIGNMENT + "\n" + MINIMAL_ALIGNMENT)


class TestParseCigar(TestCase):
    def test_empty(self):
        self.assertEqual(parse_cigar("*"), ())

    def test_operations(self):
        self.assertEqual(parse_cigar("10M5I2D"), (CigarOperation(10, 'M'), CigarOperation(5, 'I'), CigarOperation(2, 'D')))
        self.assertEqual([op.op for op in parse_cigar("1M1I1D1N1S1H1P1=1X")], list("MIDNSHP=X"))

    def test_invalid(self):
        for cigar in ("", "M", "10", "10M*", "*10M", "10m"):
            with self.assertRaises(ParseError, msg=cigar):
                parse_cigar(cigar)


class TestParseOptionalTag(TestCase):
    def test_tag(self):
        self.assertEqual(parse_optional_tag("NM:i:2"), OptionalTag("NM", "i", "2"))

    def test_empty_value(self):
        self.assertEqual(parse_optional_tag("XZ:Z:"), OptionalTag("XZ", "Z", ""))


class TestParseHeader(TestCase):
    def test_hd(self):
        header = parse_header("@HD\tVN:1.6\tSO:coordinate")
        self.assertEqual(header, Header(hd={"VN": "1.6", "SO": "coordinate"}))
        self.assertEqual(list(header.hd), ["VN", "SO"], "Field order must be preserved")
        self.assertEqual(get_sorting_order(header), SortingOrder.COORDINATE)

    def test_sections(self):
        header = parse_header(HEADER)
        self.assertEqual(header.hd, {"VN": "1.6", "SO": "coordinate"})
        self.assertEqual([sq["SN"] for sq in header.sq], ["ref", "chr2"])
        self.assertEqual(header.sq[1], {"SN": "chr2", "LN": "1000", "AS": "test"})
        self.assertEqual(header.rg, ({"ID": "grp1", "SM": "sample1", "PL": "ILLUMINA"},))
        self.assertEqual(header.pg[0]["CL"], "bwa mem ref.fa reads.fq")
        self.assertEqual(header.co, ("This is a comment", ""))
        self.assertEqual(header.user_records, {})

    def test_empty(self):
        self.assertEqual(parse_header(""), Header())

    def test_no_hd(self):
        header = parse_header("@SQ\tSN:a\tLN:10\n")
        self.assertIsNone(header.hd)
        self.assertEqual(header.sq, ({"SN": "a", "LN": "10"},))

    def test_comment_kept_verbatim(self):
        self.assertEqual(parse_header("@CO\tfree\ttext: with:colons\n").co, ("free\ttext: with:colons",))

    def test_line_endings(self):
        header = parse_header("@HD\tVN:1.6\r\n@SQ\tSN:a\tLN:1\r@CO\tc\n")
        self.assertEqual(header, Header({"VN": "1.6"}, [{"SN": "a", "LN": "1"}], co=["c"]))

    def test_user_defined_lines(self):
        header = parse_header("@HD\tVN:1.6\n@CO\thello\n@xy\tAB:1\tCD:2\n@xy\tAB:3\n@zz\tQQ:x\n")
        self.assertEqual(header.user_records, {"xy": ({"AB": "1", "CD": "2"}, {"AB": "3"}), "zz": ({"QQ": "x"},)})

    def test_out_of_order_rejected(self):
        with self.assertRaises(ParseError) as cm:
            parse_header("@HD\tVN:1.6\n@PG\tID:x\n@SQ\tSN:c\tLN:1\n")
        self.assertEqual(cm.exception.line, 3)

    def test_trailing_alignment_rejected(self):
        with self.assertRaises(ParseError) as cm:
            parse_header("@HD\tVN:1.6\n" + MINIMAL_ALIGNMENT)
        self.assertEqual((cm.exception.line, cm.exception.column), (2, 1))
        self.assertIn('end of input', cm.exception.expected)

    def test_long_field_tag_rejected(self):
        with self.assertRaises(ParseError) as cm:
            parse_header("@HD\tVNN:1.6\n")
        self.assertIn('two character header field tag', cm.exception.expected)


class TestDuplicateTags(TestCase):
    LINE = "@SQ\tSN:a\tSN:b\tLN:1"

    def test_last_wins(self):
        with self.assertWarns(DuplicateTagWarning):
            header = parse_header(self.LINE, duplicate_tags='last')
        self.assertEqual(header.sq[0], {"SN": "b", "LN": "1"})

    def test_first_wins(self):
        with self.assertWarns(DuplicateTagWarning):
            header = parse_header(self.LINE, duplicate_tags='first')
        self.assertEqual(header.sq[0], {"SN": "a", "LN": "1"})

    def test_error(self):
        with self.assertRaises(ParseError) as cm:
            parse_header(self.LINE, duplicate_tags='error')
        self.assertEqual((cm.exception.line, cm.exception.column), (1, 10))

    def test_environment_default(self):
        with mock.patch.object(sampy.util, 'DUPLICATE_TAGS', 'first'), warnings.catch_warnings():
            warnings.simplefilter('ignore', DuplicateTagWarning)
            self.assertEqual(parse_header(self.LINE).sq[0]["SN"], "a")

    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            parse_header(self.LINE, duplicate_tags='merge')

    def test_no_warning_without_duplicates(self):
        with warnings.catch_warnings():
            warnings.simplefilter('error', DuplicateTagWarning)
            parse_header(HEADER)


class TestParseSamFile(TestCase):
    def test_example(self):
        sam_file = parse_sam_file(SAM)
        self.assertEqual(sam_file.header, parse_header(HEADER))
        self.assertEqual(len(sam_file.alignments), 6)
        self.assertEqual(sam_file.alignments[0].cigar, parse_cigar("8M2I4M1D3M"))
        self.assertEqual(sam_file.alignments[2].tags, (OptionalTag("SA", "Z", "ref,29,-,6H5M,17,0;"),))

    def test_alignments_only(self):
        sam_file = parse_sam_file(ALIGNMENTS)
        self.assertEqual(sam_file.header, Header())
        self.assertEqual(len(sam_file.alignments), 6)

    def test_empty(self):
        sam_file = parse_sam_file("")
        self.assertEqual(sam_file.header, Header())
        self.assertEqual(sam_file.alignments, ())

    def test_no_trailing_newline(self):
        self.assertEqual(parse_sam_file(SAM.rstrip("\n")), parse_sam_file(SAM))

    def test_crlf(self):
        self.assertEqual(parse_sam_file(SAM.replace("\n", "\r\n")), parse_sam_file(SAM))

    def test_bytes(self):
        self.assertEqual(parse_sam_file(SAM.encode('ASCII')), parse_sam_file(SAM))

    def test_undecodable_bytes(self):
        with self.assertRaises(ParseError) as cm:
            parse_sam_file(b"r\xff\t4\t*\t0\t0\t*\t*\t0\t0\tA\t*\n")
        self.assertEqual((cm.exception.line, cm.exception.column), (1, 2))
        self.assertEqual(cm.exception.expected, ("UTF-8 text",))

        with self.assertRaises(ParseError) as cm:
            parse_header(b"@CO\tok\n@CO\t\xe9\n")
        self.assertEqual((cm.exception.line, cm.exception.column), (2, 5))
        with self.assertRaises(ParseError):
            parse_alignment(MINIMAL_ALIGNMENT.encode('ASCII') + b"\x80")

    def test_error_position(self):
        with self.assertRaises(ParseError) as cm:
            parse_sam_file(SAM + "bad\tline\n")
        e = cm.exception
        self.assertEqual((e.line, e.column), (14, 5))
        self.assertEqual(str(e), 'Expected FLAG at 14:5, found "line\\n" (SAM file / alignment)')

    def test_trailing_blank_line_rejected(self):
        with self.assertRaises(ParseError):
            parse_sam_file(SAM + "\n")

    def test_bad_header_aborts(self):
        with self.assertRaises(ParseError) as cm:
            parse_sam_file("@HD\tVN:1.6\tSO\n" + ALIGNMENTS)
        self.assertEqual(cm.exception.line, 1)
        self.assertIn('@HD line', cm.exception.trace)

    def test_header_after_alignment_rejected(self):
        with self.assertRaises(ParseError):
            parse_sam_file(ALIGNMENTS + "@CO\tlate comment\n")
