"""Consistently structured errors for HTTP APIs.

Declare errors once at module level and raise clones carrying request
specific detail:

    ProcessingFailed = HTTPError(500, "processing_fail",
                                 "Processing of the specified person failed.")

    try:
        do_risky_processing()
    except ValueError as exc:
        raise ProcessingFailed.with_detail(str(exc)) from exc
"""

from typing import Any

from pydantic import BaseModel

from httpext.errors import RangeError


class ErrorBody(BaseModel):
    """JSON projection of an ``HTTPError``."""

    id: str
    message: str
    detail: Any = None


class HTTPError(Exception):
    """An error with an HTTP status, a stable id and a human-readable message.

    Attributes:
        status: The HTTP status code to respond with.
        id: Service-unique, machine-readable identifier.
        message: One or two sentences describing the error.
        detail: Optional additional context; must be JSON serializable.
    """

    def __init__(self, status: int, error_id: str, message: str, detail: Any = None) -> None:
        self._status = status
        self._id = error_id
        self._message = message
        self._detail = detail
        super().__init__(str(self))

    @property
    def status(self) -> int:
        return self._status

    @property
    def id(self) -> str:
        return self._id

    @property
    def message(self) -> str:
        return self._message

    @property
    def detail(self) -> Any:
        return self._detail

    def __str__(self) -> str:
        if self._detail is not None:
            return f"{self._message} ({self._detail}) <HTTP {self._status}:{self._id}>"
        return f"{self._message} <HTTP {self._status}:{self._id}>"

    def __repr__(self) -> str:
        return (
            f"HTTPError(status={self._status}, error_id={self._id!r}, "
            f"message={self._message!r}, detail={self._detail!r})"
        )

    def equal(self, other: "HTTPError") -> bool:
        """Compare id, status and message. Detail is not compared."""
        return (
            self._id == other.id
            and self._status == other.status
            and self._message == other.message
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HTTPError):
            return NotImplemented
        return self.equal(other)

    def __hash__(self) -> int:
        return hash((self._id, self._status, self._message))

    def marshal(self) -> dict[str, Any]:
        """Return the JSON-ready representation (``detail`` only when set)."""
        return ErrorBody(id=self._id, message=self._message, detail=self._detail).model_dump(
            exclude_none=True
        )

    def with_detail(self, detail: Any) -> "HTTPError":
        """Return a copy of this error carrying ``detail``."""
        return HTTPError(self._status, self._id, self._message, detail)


# -- Common pre-defined errors ------------------------------------------------

BadRange = HTTPError(400, "invalid_range", "The Range header could not be parsed.")
RangeNotSatisfiable = HTTPError(
    416, "range_not_satisfiable", "The requested range cannot be satisfied."
)
NotFound = HTTPError(404, "not_found", "The requested resource does not exist.")
InternalError = HTTPError(500, "internal_error", "We encountered an internal error.")


def from_range_error(exc: RangeError) -> HTTPError:
    """Map a range error to the HTTP error a server should answer with."""
    if exc.http_status == 416:
        return RangeNotSatisfiable.with_detail(exc.message)
    return BadRange.with_detail(exc.message)
