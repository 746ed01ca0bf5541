"""
pbptool: pack, unpack and inspect PBP containers.

A PBP container is a 40-byte header (signature, version and eight u32 section
offsets) followed by up to eight sections stored back to back:

- PARAM.SFO, ICON0.PNG, ICON1.PMF, PIC0.PNG, PIC1.PNG, SND0.AT3, DATA.PSP, DATA.PSAR

Section sizes are not stored; each one is derived from the next offset (or the
end of the file for DATA.PSAR). A section with no bytes is absent.

Version check quirk: a header is rejected only when major != 1 *and*
minor != 0, so versions such as 5.0 or 1.7 are accepted.
"""

__version__ = "0.1"

__all__ = [
    "cli",
    "constants",
    "errors",
    "header",
    "layout",
    "reader",
    "writer",
]
