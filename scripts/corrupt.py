from __future__ import annotations

import argparse
import os
import struct
import sys
from typing import Optional

from pbptool.constants import MAX_OFFSET, slot_index
from pbptool.errors import PBPError

# offset table starts after signature[4] + version u16 x2
_OFFSET_TABLE_START = 8


def _write_at(path: str, offset: int, data: bytes) -> None:
    if offset < 0:
        raise ValueError("Offset must be non-negative")
    with open(path, "r+b") as f:
        f.seek(0, os.SEEK_END)
        if offset + len(data) > f.tell():
            raise ValueError("Offset beyond end of file")
        f.seek(offset)
        f.write(data)
        f.flush()
        os.fsync(f.fileno())


def _flip_byte(path: str, offset: int, xor_val: int = 0xFF) -> None:
    with open(path, "rb") as f:
        f.seek(offset)
        b = f.read(1)
    if not b:
        raise ValueError("Offset beyond end of file")
    _write_at(path, offset, bytes([b[0] ^ (xor_val & 0xFF)]))


def set_section_offset(path: str, slot, value: int) -> None:
    """Overwrite the stored offset of one slot (index or section name)."""
    if value < 0 or value > MAX_OFFSET:
        raise ValueError(f"Offset must fit in 32 bits: {value}")
    idx = slot_index(slot)
    _write_at(path, _OFFSET_TABLE_START + 4 * idx, struct.pack("<I", value))


def set_signature_byte(path: str, index: int, value: int) -> None:
    if index < 0 or index >= 4:
        raise ValueError("Signature byte index must be 0..3")
    _write_at(path, index, bytes([value & 0xFF]))


def cmd_by_offset(args: argparse.Namespace) -> None:
    _flip_byte(args.archive, args.offset, xor_val=args.xor)
    print(f"Flipped 1 byte at offset {args.offset}")


def cmd_offset(args: argparse.Namespace) -> None:
    set_section_offset(args.archive, args.slot, args.value)
    print(f"Set offset of slot {args.slot} to {args.value}")


def cmd_signature(args: argparse.Namespace) -> None:
    set_signature_byte(args.archive, args.index, args.value)
    print(f"Set signature byte {args.index} to 0x{args.value & 0xFF:02x}")


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="pbptool.corrupt", description="Corrupt PBP containers for testing")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_off = sub.add_parser("by-offset", help="Flip one byte at an absolute container offset")
    p_off.add_argument("archive", help="Path to .pbp container")
    p_off.add_argument("--offset", type=int, required=True, help="Absolute byte offset in container")
    p_off.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_off.set_defaults(func=cmd_by_offset)

    p_slot = sub.add_parser("offset", help="Overwrite the stored offset of one section")
    p_slot.add_argument("archive", help="Path to .pbp container")
    p_slot.add_argument("--slot", required=True, help="Slot index (0-7) or section name, e.g. PIC0.PNG")
    p_slot.add_argument("--value", type=lambda x: int(x, 0), required=True, help="New offset (e.g. 0xFFFFFFFF)")
    p_slot.set_defaults(func=cmd_offset)

    p_sig = sub.add_parser("signature", help="Overwrite one byte of the 4-byte signature")
    p_sig.add_argument("archive", help="Path to .pbp container")
    p_sig.add_argument("--index", type=int, default=1, help="Signature byte index (default 1)")
    p_sig.add_argument("--value", type=lambda x: int(x, 0), default=ord("X"), help="New byte value (default 'X')")
    p_sig.set_defaults(func=cmd_signature)

    args = ap.parse_args(argv)
    if args.cmd == "offset" and args.slot.isdigit():
        args.slot = int(args.slot)
    try:
        args.func(args)
    except (PBPError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
