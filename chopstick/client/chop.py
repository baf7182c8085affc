import argparse
import sys

from chopstick import __version__
from chopstick.core.chunker import chop
from chopstick.core.errors import ChopstickError

DESCRIPTION = "Separate files into chunks quickly"

EPILOG = (
    "The requested size or number of parts is a target, not a promise: when "
    "following it exactly would leave the last part empty it is lowered just "
    "enough to avoid that (e.g. 986 parts of a 512000 byte file become 985 "
    "parts of 520 bytes)."
)


def build_parser():
    parser = argparse.ArgumentParser(prog="chop", description=DESCRIPTION, epilog=EPILOG)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "-s", "--size", dest="part_size",
        help="The maximum size each part should be. Accepts units - e.g. 1GB, 20K, 128MiB",
    )
    group.add_argument("-n", "--parts", dest="num_parts", help="The number of parts to chop the file into")
    parser.add_argument(
        "-r", "--retain", "--no-delete", "--preserve", action="store_true",
        help="Don't delete the original file (requires more disk space)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print a line for every part written")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without touching any file")
    parser.add_argument("file", help="The file to split")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        result = chop(
            args.file,
            part_size=args.part_size,
            num_parts=args.num_parts,
            retain=args.retain,
            verbose=args.verbose,
            dry_run=args.dry_run,
        )
    except ChopstickError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return e.exit_code

    if args.verbose and not args.dry_run:
        print(f"[SUCCESS] {result.original} chopped into {result.split.num_parts} parts")
    return 0


if __name__ == "__main__":
    sys.exit(main())
