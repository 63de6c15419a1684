"""
Provides convenience interface for reading SAM formatted data from files and streams.
Streams passed in by the caller are never closed. Binary streams are read through a text wrapper
that is detached once reading is finished.
"""

import io

from .parser import Parser
from .util import SAMFileError


def _text_stream(stream):
    """
    Wrap binary streams so that lines are str and all three line terminators are recognised.
    """
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return io.TextIOWrapper(stream, encoding='utf-8', newline='')
    return stream


def _release(wrapper, stream):
    """
    Detach wrapper from stream so that discarding the wrapper does not close the caller's stream.
    """
    if wrapper is not stream and not stream.closed:
        wrapper.detach()


def _open(path):
    try:
        return open(path, encoding='utf-8', newline='')
    except OSError as e:
        raise SAMFileError("Error reading file: {}".format(e)) from e


def _read(stream) -> str:
    wrapper = _text_stream(stream)
    try:
        return wrapper.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SAMFileError("Error reading file: {}".format(e)) from e
    finally:
        _release(wrapper, stream)


def read_sam_file(source, duplicate_tags=None) -> 'SamFile':
    """
    Read and parse a complete SAM file.
    The entire file is read into memory before parsing, see Reader to parse one record at a time.
    :param source: Path to the file, or a text or binary stream. Streams are left open.
    :param duplicate_tags: Overrides the SAMPY_DUPLICATE_TAGS policy for this call.
    :return: SamFile instance.
    :raises SAMFileError: If the file can not be read or is not UTF-8.
    :raises ParseError: If the content is not valid SAM.
    """
    if hasattr(source, 'read'):
        text = _read(source)
    else:
        with _open(source) as stream:
            text = _read(stream)
    return Parser(text, duplicate_tags).parse(Parser.sam_file)


def read_header(source, duplicate_tags=None) -> 'Header':
    """
    Read and parse only the header of a SAM file.
    Reading stops at the first line that does not start with '@'.
    :param source: Path to the file, or a text or binary stream. Streams are left open.
    :param duplicate_tags: Overrides the SAMPY_DUPLICATE_TAGS policy for this call.
    :return: Header instance.
    """
    if hasattr(source, 'readline'):
        with Reader(source, duplicate_tags) as reader:
            return reader.header
    with _open(source) as stream:
        return Reader(stream, duplicate_tags).header


class Reader:
    """
    Reads SAM formatted data from a stream one line at a time.
    The header is parsed on construction and is available as the header attribute.
    Iterating the reader emits Alignment instances.
    The stream is not closed by the reader. Use the reader as a context manager, or call close(),
    to release a binary stream before the input is exhausted.
    """

    def __init__(self, stream, duplicate_tags=None):
        """
        Constructor.
        :param stream: Text or binary stream positioned at the start of the SAM data.
        :param duplicate_tags: Overrides the SAMPY_DUPLICATE_TAGS policy for the header.
        """
        self._stream = stream
        self._input = _text_stream(stream)
        self._pending = ''
        try:
            lines = []
            line = self._readline()
            while line.startswith('@'):
                lines.append(line)
                line = self._readline()
            self._pending = line
            self._line_number = len(lines)
            self.header = Parser(''.join(lines), duplicate_tags).parse(Parser.header)
        except Exception:
            self.close()
            raise

    def _readline(self):
        try:
            return self._input.readline()
        except (OSError, UnicodeDecodeError) as e:
            raise SAMFileError("Error reading file: {}".format(e)) from e

    def close(self):
        """
        Stop reading. The underlying stream is left open.
        Buffered text already read from a binary stream is discarded.
        """
        self._pending = ''
        if self._input is not None:
            _release(self._input, self._stream)
            self._input = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __iter__(self):
        return self

    def __next__(self) -> 'Alignment':
        line = self._pending
        if not line:
            self.close()
            raise StopIteration()
        try:
            self._pending = self._readline()
        except SAMFileError:
            self.close()
            raise
        offset = self._line_number
        self._line_number += 1
        return Parser(line, line_offset=offset).parse(Parser.alignment_line)
