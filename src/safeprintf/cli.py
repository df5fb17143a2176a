from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from .api import Analysis, analyze_file, optimize_source, render_report, typecast_source
from .errors import InternalError


log = logging.getLogger("safeprintf")

IN_PLACE = "<in-place>"


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(name)s: %(message)s", stream=sys.stderr)


def _write(text: str, source: Path, dest: str) -> None:
    if dest == "-":
        sys.stdout.write(text)
        return
    if dest == IN_PLACE:
        target, mode = source, "w"
    else:
        # Never clobber an existing file that isn't the input.
        target, mode = Path(dest), "x"
    with target.open(mode, encoding="utf-8", errors="surrogateescape", newline="") as fh:
        fh.write(text)
    log.info("wrote %s", target)


def _process(path: Path, args: argparse.Namespace) -> int:
    try:
        analysis = analyze_file(path)
    except OSError as e:
        log.error("failed reading input at %s: %s", path, e)
        return 1

    if analysis.diagnostics or not args.quiet:
        print(render_report(analysis))

    rewrites: list[tuple[str, str, Callable[[Analysis], str]]] = []
    if args.typecast is not None:
        rewrites.append(("typecast", args.typecast, typecast_source))
    if args.optimize is not None:
        rewrites.append(("optimize", args.optimize, optimize_source))

    if analysis.has_errors:
        if rewrites:
            log.warning("%s: not rewritten, the file has errors", path)
        return 1

    for kind, dest, rewrite in rewrites:
        try:
            _write(rewrite(analysis), path, dest)
        except OSError as e:
            log.error("failed writing output for --%s: %s", kind, e)
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="safeprintf", description="Validate printf cases in C programs")
    ap.add_argument("files", nargs="+", type=Path, help="C source files to validate")
    ap.add_argument(
        "--typecast",
        nargs="?",
        const=IN_PLACE,
        metavar="PATH",
        help="Write output with type casts on format arguments to PATH ('-' for stdout, no PATH: in place)",
    )
    ap.add_argument(
        "--optimize",
        nargs="?",
        const=IN_PLACE,
        metavar="PATH",
        help="Write output using safe_* calls to PATH ('-' for stdout, no PATH: in place)",
    )
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeatable)")
    ap.add_argument("-q", "--quiet", action="store_true", help="Only print diagnostics and errors")
    args = ap.parse_args(argv)

    dests = [d for d in (args.typecast, args.optimize) if d is not None]
    if len(dests) == 2 and dests[0] == dests[1]:
        ap.error("--typecast and --optimize need different destinations")
    if len(args.files) > 1 and any(d != IN_PLACE for d in dests):
        ap.error("an output PATH can only be given with a single input file")

    _configure_logging(args.verbose, args.quiet)

    status = 0
    try:
        for path in args.files:
            status = max(status, _process(path, args))
    except InternalError as e:
        print(f"internal error: {e}", file=sys.stderr)
        return 2
    return status
