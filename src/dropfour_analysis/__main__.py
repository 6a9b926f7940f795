from __future__ import annotations

import sys

from .cli.analyze_csv import main as analyze_main

USAGE = """Usage:
  python -m dropfour_analysis analyze [--csv ...] [--outdir figures] [--show]
  python -m dropfour_analysis tables  [--csv ...] [--results-dir data/turns]"""


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # no subcommand: analyze the latest turn log
    if not argv or argv[0].startswith("-"):
        return analyze_main(argv)

    cmd, rest = argv[0].lower(), argv[1:]
    if cmd in {"analyze", "analysis"}:
        return analyze_main(rest)
    if cmd in {"tables", "summary"}:
        return analyze_main(rest + ["--no-plots"])

    print(USAGE)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
