"""Error kinds raised by the pattern pipeline."""


class PatternError(ValueError):
    """Base class for every error the pattern pipeline raises."""


class InvalidImageError(PatternError):
    """No image was supplied, or the supplied data could not be decoded."""


class InvalidDimensionsError(PatternError):
    """Grid width or height is not a positive integer."""


class EmptyPaletteError(PatternError):
    """There were no colors to build a palette from (empty sample grid)."""


class ProcessingBusyError(PatternError):
    """A processing run is already in flight for this session."""
