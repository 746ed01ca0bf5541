from __future__ import annotations

import os
from typing import BinaryIO, List, Optional

from .constants import HEADER_SIZE, slot_index
from .header import PBPHeader, read_header
from .layout import Section, check_section_range, resolve_sections


class PBPReader:
    """Reader for PBP containers.

    Opening only parses and validates the 40-byte header; the payload is read
    into memory the first time a section is requested.
    """

    def __init__(self, path: str, validate: bool = True):
        self.path = path
        self.validate = validate
        self.f: Optional[BinaryIO] = None
        self.header: Optional[PBPHeader] = None
        self.file_size: int = 0
        self._content: Optional[bytes] = None
        self._payload: Optional[memoryview] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        self.f = open(self.path, "rb")
        try:
            self.header = read_header(self.f)
            if self.validate:
                self.header.validate()
            self.file_size = os.fstat(self.f.fileno()).st_size
        except Exception:
            self.close()
            raise

    def close(self):
        if self._payload is not None:
            self._payload.release()
            self._payload = None
        self._content = None
        if self.f is not None:
            self.f.close()
            self.f = None

    def load(self) -> memoryview:
        """Read the whole container and return a view of everything after the header."""
        if self.f is None:
            raise RuntimeError("Container not open")
        if self._payload is None:
            self.f.seek(0)
            self._content = self.f.read()
            self.file_size = len(self._content)
            self._payload = memoryview(self._content)[HEADER_SIZE:]
        return self._payload

    def sections(self) -> List[Section]:
        if self.header is None:
            raise RuntimeError("Container not open")
        return resolve_sections(self.header.offsets, self.file_size)

    def section(self, slot) -> Section:
        return self.sections()[slot_index(slot)]

    def read_section(self, section: Section) -> bytes:
        """Return the bytes of a present section.

        Raises:
            SectionRangeError: the section's range lies outside the file.
        """
        payload = self.load()
        if not section.present:
            return b""
        check_section_range(section, len(payload))
        start = section.corrected_offset
        return bytes(payload[start : start + section.size])

    def extract(self, section: Section, out_path: str):
        data = self.read_section(section)
        with open(out_path, "wb") as wf:
            wf.write(data)
        return len(data)
