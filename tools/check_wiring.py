from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import List, Optional

from dci.wiring import canonical_json, check_wiring, data_types_in


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Check DataObject -> provider wiring for the given modules.")
    ap.add_argument("modules", nargs="+", help="importable module names holding DataObject types")
    ap.add_argument(
        "--register",
        action="append",
        default=[],
        metavar="MODULE:FUNC",
        help="call FUNC() from MODULE before checking (repeatable)",
    )
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    for ref in args.register:
        mod_name, _, func_name = ref.partition(":")
        if not mod_name or not func_name:
            raise SystemExit(f"invalid_register_ref:{ref}")
        getattr(importlib.import_module(mod_name), func_name)()

    types: List[type] = []
    for name in args.modules:
        types.extend(data_types_in(importlib.import_module(name)))

    report = check_wiring(types)
    print(canonical_json(report.as_dict()))
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
