from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .constants import HEADER_SIZE, SECTION_COUNT, SECTION_NAMES
from .errors import SectionCountError, SectionRangeError


@dataclass(frozen=True)
class Section:
    slot: int
    name: str
    offset: int
    size: int

    @property
    def present(self) -> bool:
        return self.size > 0

    @property
    def corrected_offset(self) -> int:
        """Index of the section inside the payload (everything after the header)."""
        return self.offset - HEADER_SIZE

    @property
    def end(self) -> int:
        return self.offset + self.size


def _check_count(offsets: Sequence[int]) -> None:
    if len(offsets) != SECTION_COUNT:
        raise SectionCountError(f"Expected {SECTION_COUNT} offsets, got {len(offsets)}")


def derived_size(offsets: Sequence[int], slot: int, total_len: Optional[int] = None) -> int:
    """Size of a section, derived from the offset table.

    Slots 0..6 end where the next slot starts; the last slot runs to the end of
    the container. A non-positive difference means the slot is absent (0).
    Without ``total_len`` the last slot cannot be sized and resolves to 0.
    """
    _check_count(offsets)
    start = int(offsets[slot])
    if slot + 1 < SECTION_COUNT:
        nxt = int(offsets[slot + 1])
        return nxt - start if nxt > start else 0
    if total_len is None:
        return 0
    return total_len - start if total_len > start else 0


def resolve_sections(offsets: Sequence[int], total_len: Optional[int] = None) -> List[Section]:
    _check_count(offsets)
    return [
        Section(slot=i, name=SECTION_NAMES[i], offset=int(offsets[i]), size=derived_size(offsets, i, total_len))
        for i in range(SECTION_COUNT)
    ]


def check_section_range(section: Section, payload_len: int) -> None:
    """Raise SectionRangeError unless the section lies inside the payload."""
    corrected = section.corrected_offset
    if corrected < 0:
        raise SectionRangeError(
            f"{section.name}: offset {section.offset} points inside the {HEADER_SIZE}-byte header"
        )
    if corrected + section.size > payload_len:
        raise SectionRangeError(
            f"{section.name}: range {section.offset}..{section.end} runs past end of file "
            f"({payload_len + HEADER_SIZE} bytes)"
        )


def compute_offsets(sizes: Sequence[Optional[int]]) -> Tuple[List[int], int]:
    """Lay out sections back to back after the header.

    ``None`` and 0 both mean absent: the slot stores the running offset and
    takes no space.

    Returns:
        (offsets, total_len) where total_len includes the header.
    """
    _check_count(sizes)
    offsets: List[int] = []
    cur = HEADER_SIZE
    for sz in sizes:
        offsets.append(cur)
        cur += int(sz or 0)
    return offsets, cur
