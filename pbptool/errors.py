class PBPError(Exception):
    """Base class for pbptool-specific errors."""


# Header/format related
class FormatError(PBPError):
    pass


class InvalidSignatureError(FormatError):
    pass


class InvalidVersionError(FormatError):
    pass


class HeaderTruncatedError(FormatError):
    pass


# Layout/bounds
class SectionRangeError(PBPError):
    """A section's byte range falls outside the container; only that slot is skipped."""


class LayoutOverflowError(PBPError):
    pass


class SectionCountError(PBPError):
    pass
