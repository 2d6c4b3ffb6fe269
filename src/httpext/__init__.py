"""httpext - HTTP Range parsing, CORS policies, middleware sets and structured errors."""

__version__ = "0.1.0"

from httpext.cors import CORSPolicy
from httpext.errors import (
    RangeError,
    RangeFormatError,
    RangeInvalid,
    RangeIsSuffix,
    RangeOutsideConstraints,
    RangeUnsatisfiableZeroLength,
    UnmatchedCORSOrigin,
)
from httpext.httperror import HTTPError, from_range_error
from httpext.middleware import MiddlewareSet
from httpext.range_header import (
    RANGE_UNCONSTRAINED,
    ContentRange,
    format_unsatisfied,
    parse_range,
)

__all__ = [
    "__version__",
    "ContentRange",
    "CORSPolicy",
    "HTTPError",
    "MiddlewareSet",
    "RANGE_UNCONSTRAINED",
    "RangeError",
    "RangeFormatError",
    "RangeInvalid",
    "RangeIsSuffix",
    "RangeOutsideConstraints",
    "RangeUnsatisfiableZeroLength",
    "UnmatchedCORSOrigin",
    "format_unsatisfied",
    "from_range_error",
    "parse_range",
]
