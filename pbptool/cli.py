from __future__ import annotations

import argparse
import json as _json
import os
import sys
from typing import List, Optional

from pbptool.constants import NULL_SECTION, SECTION_COUNT, SECTION_NAMES
from pbptool.errors import FormatError, PBPError, SectionRangeError
from pbptool.reader import PBPReader
from pbptool.writer import PBPWriter


def _next_nonconflicting_path(path: str) -> str:
    if not os.path.lexists(path):
        return path
    base_dir = os.path.dirname(path)
    root, ext = os.path.splitext(os.path.basename(path))
    i = 1
    while True:
        candidate = os.path.join(base_dir, f"{root} ({i}){ext}")
        if not os.path.lexists(candidate):
            return candidate
        i += 1


def cmd_analyze(archive: str, *, as_json: bool = False):
    """Print the header and section offsets of a container.

    Only the header is read; the payload is never loaded.

    Args:
        archive: Path to a .pbp file.
        as_json: Emit a JSON document instead of the text listing.
    """
    with PBPReader(archive) as r:
        h = r.header
        sections = r.sections()
        file_size = r.file_size
    if as_json:
        print(_json.dumps({
            "signature": h.signature.hex(),
            "version": h.version,
            "file_size": file_size,
            "sections": [
                {
                    "slot": s.slot,
                    "name": s.name,
                    "offset": s.offset if s.present else None,
                    "size": s.size,
                    "present": s.present,
                }
                for s in sections
            ],
        }))
        return
    print("PBP Header:")
    print(f"\tSignature:\t{h.signature.decode('latin-1')}")
    print(f"\tVersion:\t{h.version}")
    print("Offsets:")
    for s in sections:
        print(f"\t{s.name}:\t{s.offset if s.present else 'NULL'}")


def cmd_unpack(archive: str, outdir: str, *, exists: str = "overwrite", quiet: bool = False):
    """Write every present section of a container into ``outdir``.

    A section whose range falls outside the file, or that cannot be written,
    is skipped with a warning; the remaining sections are still extracted.

    Args:
        archive: Path to a .pbp file.
        outdir: Output directory, created if missing.
        exists: What to do when a destination file exists: overwrite, skip,
            rename (append ' (n)' before the extension) or fail (abort).
        quiet: Limit output to the summary line.
    """
    extracted = 0
    absent = 0
    skipped = 0
    total_bytes = 0
    with PBPReader(archive) as r:
        r.load()
        try:
            os.makedirs(outdir, exist_ok=True)
        except FileExistsError:
            # each slot write below fails and is reported on its own
            print(f"Warning: {outdir} exists and is not a directory", file=sys.stderr)
        for s in r.sections():
            if not s.present:
                absent += 1
                if not quiet:
                    print(f"     absent: {s.name}")
                continue
            dst = os.path.join(outdir, s.name)
            rename_note = None
            if os.path.lexists(dst):
                if exists == "overwrite":
                    if os.path.isdir(dst) and not os.path.islink(dst):
                        print(f"Warning: cannot overwrite directory with {s.name}: {dst}", file=sys.stderr)
                        skipped += 1
                        continue
                elif exists == "skip":
                    print(f"   skipping: {s.name} (exists)")
                    skipped += 1
                    continue
                elif exists == "rename":
                    dst = _next_nonconflicting_path(dst)
                    rename_note = dst
                else:
                    raise RuntimeError(f"Destination exists: {dst}")
            try:
                n = r.extract(s, dst)
            except SectionRangeError as exc:
                print(f"Warning: skipping {exc}", file=sys.stderr)
                skipped += 1
                continue
            except OSError as exc:
                print(f"Warning: failed to write {dst}: {exc}", file=sys.stderr)
                skipped += 1
                continue
            extracted += 1
            total_bytes += n
            if not quiet:
                print(f"  unpacking: {s.name} ({n} bytes)")
            if rename_note:
                print(f"       note: renamed to {rename_note}")
    print(
        f"Done: extracted {extracted}/{SECTION_COUNT} sections ({total_bytes} bytes); "
        f"absent={absent} skipped={skipped}"
    )


def cmd_pack(output: str, inputs: List[str], *, quiet: bool = False):
    """Assemble a container from one input per slot.

    Args:
        output: Path of the .pbp file to write.
        inputs: Exactly 8 paths in slot order; "NULL" leaves a slot absent.
        quiet: Limit output to the summary line.
    """
    if len(inputs) != SECTION_COUNT:
        raise ValueError(f"pack needs exactly {SECTION_COUNT} inputs, got {len(inputs)}")
    with PBPWriter(output) as w:
        for i, src in enumerate(inputs):
            name = SECTION_NAMES[i]
            if src == NULL_SECTION:
                if not quiet:
                    print(f"     absent: {name}")
                continue
            try:
                n = w.add_file(i, src)
            except OSError as exc:
                raise RuntimeError(f"Failed to read input file '{src}': {exc.strerror or exc}") from exc
            if not quiet:
                print(f"    packing: {name} <- {src} ({n} bytes)")
        present = sum(1 for sz in w.sizes() if sz)
        total = w.finalize()
    print(f"Done: wrote {total} bytes to {output}; sections={present}/{SECTION_COUNT}")


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors exit 1 like every other failure
    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    ap = _ArgumentParser(
        prog="pbptool",
        description="Pack, unpack and analyze PBP containers",
        epilog="Sections, in slot order: " + ", ".join(SECTION_NAMES),
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pack = sub.add_parser("pack", help="Pack 8 files into a container")
    ap_pack.add_argument("output", help="Output .pbp path")
    ap_pack.add_argument(
        "inputs",
        nargs=SECTION_COUNT,
        metavar=tuple(n.lower() for n in SECTION_NAMES),
        help=f"One input per section in slot order; use {NULL_SECTION} to leave a section out",
    )
    ap_pack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_unpack = sub.add_parser("unpack", help="Unpack sections into a directory")
    ap_unpack.add_argument("archive", help="Input .pbp path")
    ap_unpack.add_argument("outdir", help="Output directory")
    ap_unpack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")
    ap_unpack.add_argument(
        "--exists",
        choices=["overwrite", "skip", "rename", "fail"],
        default="overwrite",
        help=(
            "What to do if a destination file exists: overwrite (truncate/replace), "
            "skip (do not extract that section), rename (append ' (n)' before extension), or fail (abort). "
            "Default: overwrite"
        ),
    )

    ap_analyze = sub.add_parser("analyze", help="Show header and section offsets")
    ap_analyze.add_argument("archive", help="Input .pbp path")
    ap_analyze.add_argument("--json", action="store_true", help="Emit JSON")

    sub.add_parser("help", help="Show this help")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "pack":
            cmd_pack(args.output, args.inputs, quiet=args.quiet)
        elif args.cmd == "unpack":
            cmd_unpack(args.archive, args.outdir, exists=args.exists, quiet=args.quiet)
        elif args.cmd == "analyze":
            cmd_analyze(args.archive, as_json=args.json)
        elif args.cmd == "help":
            ap.print_help()
        else:
            raise RuntimeError("Unknown command")
    except FormatError as e:
        print(f"Error: Header validation failed: {e}", file=sys.stderr)
        sys.exit(1)
    except (PBPError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
