# Magic and version
HEADER_MAGIC = b"\x00PBP"    # 4 bytes: "\0PBP"; only bytes 1..3 are checked
SIGNATURE_TAG = b"PBP"

VERSION_MAJOR = 1
VERSION_MINOR = 0

# Header layout
HEADER_SIZE = 40
SECTION_COUNT = 8

# Stored offsets are u32
MAX_OFFSET = 0xFFFFFFFF

# Slot order is the on-disk order
SECTION_NAMES = (
    "PARAM.SFO",
    "ICON0.PNG",
    "ICON1.PMF",
    "PIC0.PNG",
    "PIC1.PNG",
    "SND0.AT3",
    "DATA.PSP",
    "DATA.PSAR",
)

# Pack-time marker for an absent section
NULL_SECTION = "NULL"


def slot_index(slot) -> int:
    """Map a slot number or canonical section name to its index."""
    if isinstance(slot, str):
        try:
            return SECTION_NAMES.index(slot.upper())
        except ValueError:
            raise ValueError(f"Unknown section name: {slot}") from None
    idx = int(slot)
    if idx < 0 or idx >= SECTION_COUNT:
        raise ValueError(f"Slot index out of range (0..{SECTION_COUNT - 1}): {idx}")
    return idx
