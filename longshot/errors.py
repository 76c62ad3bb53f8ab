class PaginationError(Exception):
    """Base class for everything the conversion pipeline raises."""


class InvalidGeometryError(PaginationError, ValueError):
    """Page geometry leaves no printable area (or quality is out of range)."""


class ImageTooSmallError(PaginationError, ValueError):
    """Source image has a zero dimension."""


class EmptyInputError(PaginationError, ValueError):
    """Assembly was asked to build a document without pages."""


class DecodeError(PaginationError):
    """Source bytes could not be loaded as an image."""


class EncodeError(PaginationError):
    def __init__(self, message, page_index=None):
        super().__init__(message)
        self.page_index = page_index


class ConversionCancelled(PaginationError):
    """A newer run superseded this one before it finished."""
