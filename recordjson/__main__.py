# __main__.py
# Command-line checker: parse a JSON file into a declared record type.
#
#   python -m recordjson data.json --type mypackage.models:Orchard
#
# Exit codes: 0 when the file parses, 1 on a ParseError, 2 when the record
# type cannot be imported or is not a valid record declaration.

import argparse
import importlib
import logging
import sys
from typing import List, Optional

from .errors import ParseError
from .parser import DEPTH_LIMIT_DEFAULT, parse_stream
from .properties import check_record_type
from .serializer import dumps

log = logging.getLogger("recordjson")


def _load_type(dotted: str):
    module_name, sep, qualname = dotted.partition(":")
    if not sep or not module_name or not qualname:
        raise ValueError(f"record type must be given as module:Class, got {dotted!r}")
    target = importlib.import_module(module_name)
    for part in qualname.split("."):
        target = getattr(target, part)
    return target


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="recordjson", description="Check JSON against a declared record type")
    ap.add_argument("file", help="JSON file to parse")
    ap.add_argument("--type", required=True, dest="record_type", help="record type as module:Class")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("--echo", action="store_true", help="print the record re-serialized as compact JSON")
    ap.add_argument("--debug", action="store_true", help="enable debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cls = _load_type(args.record_type)
        check_record_type(cls)
    except (ImportError, AttributeError, ValueError, TypeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        with open(args.file, "r", encoding="utf-8") as fp:
            record = parse_stream(cls, fp, max_depth=args.max_depth)
    except ParseError as exc:
        print(f"ParseError: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    log.debug("parsed %s from %s", cls.__name__, args.file)
    print(dumps(record) if args.echo else "OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
