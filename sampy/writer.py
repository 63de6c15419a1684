"""
Provides convenience interface for writing SAM formatted data to files and streams.
"""

import io

from .formatter import format_alignment, format_header
from .util import SAMFileError


class Writer:
    """
    Writes SAM formatted data to a stream. Call the instance with an Alignment to write it as one line.
    """

    def __init__(self, output, header=None):
        """
        Constructor.
        :param output: Text or binary stream to write to.
        :param header: Header instance to write before any alignment, or None to write no header.
        """
        self._output = output
        self._binary = isinstance(output, (io.RawIOBase, io.BufferedIOBase))
        if header is not None:
            self._write(format_header(header))

    def _write(self, text):
        try:
            self._output.write(text.encode('utf-8') if self._binary else text)
        except OSError as e:
            raise SAMFileError("Error writing file: {}".format(e)) from e

    def __call__(self, alignment):
        self._write(format_alignment(alignment) + "\n")


def write_sam_file(sam_file, destination) -> None:
    """
    Write a complete SAM file.
    :param sam_file: SamFile instance to write.
    :param destination: Path to the output file, or a text or binary stream.
    :raises SAMFileError: If the file can not be opened or written.
    """
    if hasattr(destination, 'write'):
        _write_all(Writer(destination, sam_file.header), sam_file.alignments)
        return
    try:
        output = open(destination, 'w', encoding='utf-8', newline='')
    except OSError as e:
        raise SAMFileError("Error writing file: {}".format(e)) from e
    with output:
        _write_all(Writer(output, sam_file.header), sam_file.alignments)


def _write_all(writer, alignments):
    for alignment in alignments:
        writer(alignment)
