from __future__ import annotations

import os
import tempfile
from typing import List, Optional, Sequence

from .constants import NULL_SECTION, SECTION_COUNT, SECTION_NAMES, slot_index
from .errors import SectionCountError
from .header import PBPHeader, new_header
from .layout import compute_offsets


def _apply_default_mode(path: str) -> None:
    # mkstemp creates 0600 files; give the container the mode open() would have
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(path, 0o666 & ~umask)


class PBPWriter:
    """Builds a PBP container in memory and commits it in one step.

    Sections are buffered until ``finalize``; the container is written to a
    temporary file beside the output and renamed over it, so a failed pack
    never leaves a partial file behind.
    """

    def __init__(self, out_path: str):
        self.out_path = out_path
        self.contents: List[Optional[bytes]] = [None] * SECTION_COUNT
        self.finalized = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.contents = [None] * SECTION_COUNT

    def set_section(self, slot, data: Optional[bytes]):
        """Store ``data`` for a slot (index or canonical name); None marks it absent."""
        if self.finalized:
            raise RuntimeError("Container already finalized")
        self.contents[slot_index(slot)] = bytes(data) if data is not None else None

    def add_file(self, slot, fs_path: str) -> int:
        with open(fs_path, "rb") as fh:
            data = fh.read()
        self.set_section(slot, data)
        return len(data)

    def sizes(self) -> List[Optional[int]]:
        return [len(c) if c is not None else None for c in self.contents]

    def layout(self) -> PBPHeader:
        offsets, _total = compute_offsets(self.sizes())
        return new_header(offsets)

    def finalize(self) -> int:
        """Write header + sections to ``out_path``; returns the container size."""
        if self.finalized:
            raise RuntimeError("Container already finalized")
        header_raw = self.layout().pack()
        out_dir = os.path.dirname(os.path.abspath(self.out_path))
        fd, temp_path = tempfile.mkstemp(prefix=".pbptool-", suffix=".tmp", dir=out_dir)
        total = 0
        try:
            with os.fdopen(fd, "wb") as out:
                out.write(header_raw)
                total += len(header_raw)
                for data in self.contents:
                    if not data:
                        continue
                    out.write(data)
                    total += len(data)
                out.flush()
                os.fsync(out.fileno())
            _apply_default_mode(temp_path)
            os.replace(temp_path, self.out_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise
        self.finalized = True
        return total


def pack_pbp(output: str, inputs: Sequence[Optional[str]]) -> PBPHeader:
    """Pack exactly 8 inputs into ``output``.

    Each input is a file path, or ``None`` / ``"NULL"`` for an absent section.
    All inputs are read before anything is written; an unreadable input
    raises OSError and no output is produced.
    """
    if len(inputs) != SECTION_COUNT:
        raise SectionCountError(f"pack needs exactly {SECTION_COUNT} inputs ({', '.join(SECTION_NAMES)}), got {len(inputs)}")
    with PBPWriter(output) as w:
        for i, src in enumerate(inputs):
            if src is None or src == NULL_SECTION:
                continue
            w.add_file(i, src)
        header = w.layout()
        w.finalize()
    return header
