"""
view
view.py [options] in.sam

Parses a SAM file and prints a summary of its header and alignments to standard output.
With no options, prints the header summary followed by alignment statistics.

OPTIONS:

-H Print the header summary only.
-c Instead of printing a summary, only count the alignments and print the total number.
-n INT Also describe the first INT alignments individually [0].
-h Print this help and exit.

Exits with status 1 and prints the error to standard error if the file can not be read or is not valid SAM.
"""

import getopt
import sys

from sampy import InvalidSAM, SAMFileError, read_header, read_sam_file
from sampy.report import summarize, summarize_header


def main(argv, out=None, err=None) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        opts, args = getopt.gnu_getopt(argv, 'Hcn:h')
    except getopt.GetoptError as e:
        print(e, file=err)
        return 2
    opts = dict(opts)

    if '-h' in opts:
        print(__doc__, file=out)
        return 0
    if len(args) != 1:
        print("Exactly one input file must be specified.", file=err)
        return 2

    try:
        count = int(opts.get('-n', 0))
    except ValueError:
        print("-n expects an integer.", file=err)
        return 2

    try:
        if '-H' in opts:
            lines = summarize_header(read_header(args[0]))
        else:
            sam_file = read_sam_file(args[0])
            if '-c' in opts:
                lines = [str(len(sam_file.alignments))]
            else:
                lines = summarize(sam_file, count)
        for line in lines:
            print(line, file=out)
    except (SAMFileError, InvalidSAM) as e:
        print("Error parsing SAM file: {}".format(e), file=err)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
