import argparse
import sys

from chopstick import __version__
from chopstick.core.chunker import stick
from chopstick.core.errors import ChopstickError


def build_parser():
    parser = argparse.ArgumentParser(prog="stick", description="Reconstruct files from parts efficiently")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-r", "--retain", "--no-delete", "--preserve", action="store_true",
        help="Don't delete the part files (requires more disk space)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print a line for every part processed")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without touching any file")
    parser.add_argument(
        "file_name",
        help="The file to reconstruct. You only need to specify one part, providing the extension is optional",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        result = stick(args.file_name, retain=args.retain, verbose=args.verbose, dry_run=args.dry_run)
    except ChopstickError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return e.exit_code

    if args.verbose and not args.dry_run:
        print(f"[SUCCESS] {len(result.parts)} parts stuck back into {result.original}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
