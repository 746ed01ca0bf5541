from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Sequence, Tuple

from .constants import (
    HEADER_MAGIC,
    HEADER_SIZE,
    MAX_OFFSET,
    SECTION_COUNT,
    SIGNATURE_TAG,
    VERSION_MAJOR,
    VERSION_MINOR,
)
from .errors import (
    HeaderTruncatedError,
    InvalidSignatureError,
    InvalidVersionError,
    LayoutOverflowError,
    SectionCountError,
)


# PBP header (fixed 40 bytes, little endian, no padding)
# struct: <4s H H 8I
#  - signature[4]   ("\0PBP")
#  - version_minor u16
#  - version_major u16
#  - offset[8] u32  (absolute offset of each section)
_HEADER_STRUCT = struct.Struct("<4sHH8I")

if _HEADER_STRUCT.size != HEADER_SIZE:  # pragma: no cover - layout guard
    raise ImportError(f"PBP header struct is {_HEADER_STRUCT.size} bytes, expected {HEADER_SIZE}")


@dataclass
class PBPHeader:
    signature: bytes
    version_minor: int
    version_major: int
    offsets: Tuple[int, ...]

    def __post_init__(self):
        if len(self.signature) != len(HEADER_MAGIC):
            raise InvalidSignatureError(f"Signature must be {len(HEADER_MAGIC)} bytes, got {len(self.signature)}")
        offsets = tuple(int(o) for o in self.offsets)
        if len(offsets) != SECTION_COUNT:
            raise SectionCountError(f"PBP header needs exactly {SECTION_COUNT} offsets, got {len(offsets)}")
        self.offsets = offsets

    @property
    def version(self) -> str:
        return f"{self.version_major}.{self.version_minor}"

    @classmethod
    def unpack(cls, raw: bytes) -> "PBPHeader":
        if len(raw) < HEADER_SIZE:
            raise HeaderTruncatedError(f"Failed to read header: got {len(raw)} of {HEADER_SIZE} bytes")
        signature, vmin, vmaj, *offsets = _HEADER_STRUCT.unpack_from(raw, 0)
        return cls(signature=signature, version_minor=vmin, version_major=vmaj, offsets=tuple(offsets))

    def pack(self) -> bytes:
        for i, off in enumerate(self.offsets):
            if off < 0 or off > MAX_OFFSET:
                raise LayoutOverflowError(f"Offset of slot {i} does not fit in 32 bits: {off}")
        return _HEADER_STRUCT.pack(self.signature, self.version_minor, self.version_major, *self.offsets)

    def validate(self) -> None:
        validate_header(self)


def validate_header(h: PBPHeader) -> None:
    """Check the signature and version of a parsed header.

    Byte 0 of the signature is not checked. The version test only rejects
    headers where the major is not 1 *and* the minor is not 0, so 5.0 and
    1.7 are both accepted.

    Raises:
        InvalidSignatureError: bytes 1..3 are not ``PBP``.
        InvalidVersionError: major != 1 and minor != 0.
    """
    if h.signature[1:4] != SIGNATURE_TAG:
        raise InvalidSignatureError(f"Invalid signature: {h.signature!r}")
    if h.version_major != 1 and h.version_minor != 0:
        raise InvalidVersionError(f"Invalid version: {h.version}")


def new_header(offsets: Sequence[int]) -> PBPHeader:
    return PBPHeader(
        signature=HEADER_MAGIC,
        version_minor=VERSION_MINOR,
        version_major=VERSION_MAJOR,
        offsets=tuple(offsets),
    )


def read_header(f: BinaryIO) -> PBPHeader:
    f.seek(0)
    raw = f.read(HEADER_SIZE)
    return PBPHeader.unpack(raw)
