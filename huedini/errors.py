"""Error types raised by the legend detection pipeline.

Every error subclasses ``ValueError`` as well as ``LegendDetectionError`` so
callers that already guard image processing with ``except ValueError`` keep
working. None of them is recoverable within a pipeline run.
"""


class LegendDetectionError(Exception):
    """Base class for all huedini errors."""


class ImageLoadError(LegendDetectionError, ValueError):
    """An image file is missing or could not be decoded."""


class InvalidParameter(LegendDetectionError, ValueError):
    """A configuration value or call argument is out of range."""


class UnsupportedConversion(LegendDetectionError, ValueError):
    """No transform is defined between the requested color spaces."""


class InvalidRegion(LegendDetectionError, ValueError):
    """A region reached the sampler with a zero-area bounding rectangle."""
