"""Range and CORS error definitions for httpext."""


class RangeError(ValueError):
    """A Range header that cannot be parsed, constrained or rendered.

    Attributes:
        code: Machine-readable error code (e.g. "RangeInvalid").
        message: Human-readable error description.
        http_status: The HTTP status a server should answer with.
    """

    def __init__(self, code: str, message: str, http_status: int = 400) -> None:
        """Initialize the range error.

        Args:
            code: Error code.
            message: Error description.
            http_status: HTTP status code (default 400).
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status


# -- Range errors -------------------------------------------------------------


class RangeIsSuffix(RangeError):
    """A negative first index was combined with a last index."""

    def __init__(
        self,
        message: str = "first index in range is negative, indicating a suffix -- "
        "no last index may be supplied",
    ) -> None:
        super().__init__(code="RangeIsSuffix", message=message, http_status=400)


class RangeInvalid(RangeError):
    """The range is malformed or its first index exceeds its last."""

    def __init__(self, message: str = "first index in range must be <= last index") -> None:
        super().__init__(code="RangeInvalid", message=message, http_status=400)


class RangeUnsatisfiableZeroLength(RangeError):
    """A non-suffix range was requested from an empty collection."""

    def __init__(self, message: str = "range can only satisfy a zero-length set") -> None:
        super().__init__(code="RangeUnsatisfiableZeroLength", message=message, http_status=416)


class RangeOutsideConstraints(RangeError):
    """The range begins past the last element of the collection."""

    def __init__(
        self, message: str = "range begins outside of the total number of elements"
    ) -> None:
        super().__init__(code="RangeOutsideConstraints", message=message, http_status=416)


class RangeFormatError(RangeError):
    """The range is only partially bound and cannot be rendered."""

    def __init__(self, message: str = "range must be fully bound to be formatted") -> None:
        super().__init__(code="RangeFormatError", message=message, http_status=400)


# -- CORS errors --------------------------------------------------------------


class UnmatchedCORSOrigin(Exception):
    """The request Origin is not in the policy's allow-list."""

    def __init__(self, origin: str = "") -> None:
        super().__init__(f"Unmatched CORS origin: {origin!r}")
        self.origin = origin
