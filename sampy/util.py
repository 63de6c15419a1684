import ctypes as C
import os

FILE_FORMAT_VERSION = '1.6'
"""str: Version of the SAM specification implemented, used as the default @HD VN value."""

FILE_FORMAT_DATE = '22 May 2018'
"""str: Date of the implemented SAM specification revision."""

UINT8_MAX = 2 ** (8 * C.sizeof(C.c_uint8)) - 1
UINT16_MAX = 2 ** (8 * C.sizeof(C.c_uint16)) - 1
INT32_MAX = 2 ** (8 * C.sizeof(C.c_int32) - 1) - 1
INT32_MIN = -INT32_MAX - 1

DUPLICATE_TAG_POLICIES = ('last', 'first', 'error')
"""tuple: Accepted ways of resolving a tag repeated within one header line."""

DUPLICATE_TAGS = os.getenv('SAMPY_DUPLICATE_TAGS', 'last').lower()
"""str: Default duplicate header tag policy, see DUPLICATE_TAG_POLICIES."""


class InvalidSAM(ValueError):
    """
    Exception to indicate invalid or unexpected data was encountered while working with SAM formatted data.
    """
    pass


class ParseError(InvalidSAM):
    """
    Exception raised when SAM text does not match the grammar.
    Describes the furthest position the parser reached and what it expected to find there.
    """

    def __init__(self, text: str, index: int, expected=(), trace=(), line_offset: int = 0):
        """
        Constructor.
        :param text: The complete text being parsed.
        :param index: Offset into text of the furthest failure.
        :param expected: Names of the grammar elements that would have been accepted at index.
        :param trace: Names of the grammar rules that were active at index, outermost first.
        :param line_offset: Number of lines preceding text in the source it was taken from.
        """
        self.index = index
        self.expected = tuple(expected)
        self.trace = tuple(trace)
        self.line, self.column = line_column(text, index)
        self.line += line_offset
        self.found = text[index:index + 10]
        super().__init__(self.long_message())

    def long_message(self) -> str:
        msg = "Expected {} at {}:{}, found {}".format(
            " or ".join(self.expected) or "end of input",
            self.line,
            self.column,
            '"{}"'.format(self.found.encode('unicode_escape').decode('ASCII')) if self.found else "end of input",
        )
        if self.trace:
            msg += " (" + " / ".join(self.trace) + ")"
        return msg


class SAMFileError(OSError):
    """
    Exception to indicate a SAM file could not be opened, read, or written.
    """
    pass


class DuplicateTagWarning(UserWarning):
    """
    Warning issued when a tag occurs more than once in a single header line and one occurrence is discarded.
    """
    pass


def line_column(text, index):
    """
    Convert an offset into 1-based line and column numbers.
    All three line terminators are counted as a single line break.
    """
    prefix = text[:index].replace('\r\n', '\n').replace('\r', '\n')
    line = prefix.count('\n') + 1
    return line, len(prefix) - prefix.rfind('\n')


def duplicate_tag_policy(policy=None) -> str:
    """
    Resolve the duplicate header tag policy.
    :param policy: One of DUPLICATE_TAG_POLICIES or None to use the SAMPY_DUPLICATE_TAGS environment default.
    :return: The validated policy.
    """
    policy = DUPLICATE_TAGS if policy is None else policy
    if policy not in DUPLICATE_TAG_POLICIES:
        raise ValueError("Unknown duplicate tag policy {!r}, expected one of {}.".format(policy, ", ".join(DUPLICATE_TAG_POLICIES)))
    return policy
