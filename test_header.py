from __future__ import annotations

import io
import struct
import unittest

from pbptool.constants import HEADER_MAGIC, HEADER_SIZE
from pbptool.errors import (
    FormatError,
    HeaderTruncatedError,
    InvalidSignatureError,
    InvalidVersionError,
    LayoutOverflowError,
    SectionCountError,
)
from pbptool.header import PBPHeader, new_header, read_header, validate_header


OFFSETS = (40, 140, 140, 190, 390, 390, 400, 1400)


def _raw_header(signature=b"\x00PBP", minor=0, major=1, offsets=OFFSETS) -> bytes:
    return signature + struct.pack("<HH", minor, major) + struct.pack("<8I", *offsets)


class HeaderLayoutTests(unittest.TestCase):
    def test_pack_is_byte_exact(self):
        raw = new_header(OFFSETS).pack()
        self.assertEqual(len(raw), HEADER_SIZE)
        self.assertEqual(raw[0:4], HEADER_MAGIC)
        # version stored as [minor, major]
        self.assertEqual(raw[4:8], b"\x00\x00\x01\x00")
        self.assertEqual(raw[8:12], b"\x28\x00\x00\x00")
        self.assertEqual(raw[36:40], struct.pack("<I", 1400))
        self.assertEqual(raw, _raw_header())

    def test_unpack_fields(self):
        h = PBPHeader.unpack(_raw_header(minor=7, major=3))
        self.assertEqual(h.signature, b"\x00PBP")
        self.assertEqual(h.version_minor, 7)
        self.assertEqual(h.version_major, 3)
        self.assertEqual(h.version, "3.7")
        self.assertEqual(h.offsets, OFFSETS)

    def test_unpack_ignores_trailing_bytes(self):
        h = PBPHeader.unpack(_raw_header() + b"payload")
        self.assertEqual(h.offsets, OFFSETS)

    def test_truncated_header(self):
        with self.assertRaises(HeaderTruncatedError):
            PBPHeader.unpack(_raw_header()[:39])
        with self.assertRaises(FormatError):
            read_header(io.BytesIO(b"\x00PB"))

    def test_read_header_from_stream(self):
        f = io.BytesIO(_raw_header() + b"\xAA" * 16)
        f.seek(20)
        h = read_header(f)
        self.assertEqual(h.offsets[7], 1400)

    def test_exactly_eight_offsets(self):
        with self.assertRaises(SectionCountError):
            new_header(OFFSETS[:7])
        with self.assertRaises(SectionCountError):
            new_header(OFFSETS + (2000,))

    def test_offset_overflow_rejected_on_pack(self):
        h = new_header((40, 40, 40, 40, 40, 40, 40, 0x1_0000_0000))
        with self.assertRaises(LayoutOverflowError):
            h.pack()

    def test_max_u32_offset_roundtrips(self):
        h = new_header((40, 40, 40, 0xFFFFFFFF, 40, 40, 40, 40))
        self.assertEqual(PBPHeader.unpack(h.pack()).offsets[3], 0xFFFFFFFF)

    def test_signature_must_be_four_bytes(self):
        with self.assertRaises(InvalidSignatureError):
            PBPHeader(b"PBP", 0, 1, OFFSETS)
        with self.assertRaises(InvalidSignatureError):
            PBPHeader(b"\x00PBPX", 0, 1, OFFSETS)


class HeaderValidationTests(unittest.TestCase):
    def test_default_header_is_valid(self):
        validate_header(new_header(OFFSETS))

    def test_signature_byte_zero_not_checked(self):
        PBPHeader.unpack(_raw_header(signature=b"ZPBP")).validate()

    def test_bad_signature(self):
        for sig in (b"\x00XBP", b"\x00PXP", b"\x00PBX", b"XBP\x00"):
            with self.subTest(sig=sig):
                with self.assertRaises(InvalidSignatureError):
                    PBPHeader.unpack(_raw_header(signature=sig)).validate()

    def test_version_quirk_is_preserved(self):
        accepted = [(1, 0), (1, 7), (5, 0), (0, 0), (1, 65535)]
        rejected = [(2, 3), (0, 1), (65535, 65535)]
        for major, minor in accepted:
            with self.subTest(version=(major, minor)):
                PBPHeader.unpack(_raw_header(minor=minor, major=major)).validate()
        for major, minor in rejected:
            with self.subTest(version=(major, minor)):
                with self.assertRaises(InvalidVersionError):
                    PBPHeader.unpack(_raw_header(minor=minor, major=major)).validate()

    def test_signature_checked_before_version(self):
        with self.assertRaises(InvalidSignatureError):
            PBPHeader.unpack(_raw_header(signature=b"\x00XBP", minor=3, major=2)).validate()


if __name__ == "__main__":
    unittest.main()
