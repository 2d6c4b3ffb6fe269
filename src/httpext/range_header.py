"""HTTP Range / Content-Range handling according to RFC 7233.

A ``ContentRange`` is built from a ``Range`` request header, resolved against
the size of the collection being served, and rendered as the body of the
``Content-Range`` response header. Three shapes are supported:

    resources=-100    # suffix: the last 100 resources
    resources=0-99    # fixed: indices [0, 99]
    resources=100-    # open-ended: index 100 through the end

Only single ranges are supported; range parameters are not.
"""

import logging
import re

from httpext.errors import (
    RangeFormatError,
    RangeInvalid,
    RangeIsSuffix,
    RangeOutsideConstraints,
    RangeUnsatisfiableZeroLength,
)

logger = logging.getLogger(__name__)

# Returned by accessors whenever the requested value has not been bound.
RANGE_UNCONSTRAINED = -1

HEADER_RANGE = "Range"
HEADER_CONTENT_RANGE = "Content-Range"
HEADER_ACCEPT_RANGES = "Accept-Ranges"


class ContentRange:
    """A single range over a collection of known or unknown size.

    The first and last indices are bound independently. Which of them are
    bound decides the shape of the range:

        first unbound, last negative -> suffix (``-last`` items from the end)
        first bound, last unbound    -> open-ended (``first`` to the end)
        both bound                   -> fixed, inclusive on both ends

    Instances are mutable and carry no locking.
    """

    def __init__(self, units: str = "", first: int | None = None, last: int | None = None) -> None:
        """Create a range, binding ``first`` and then ``last`` when given.

        Raises:
            RangeIsSuffix: If ``first`` is negative.
            RangeInvalid: If ``last`` is smaller than ``first``.
        """
        self._units = units
        self._first = 0
        self._last = 0
        self._first_bound = False
        self._last_bound = False
        self._total = 0
        self._total_bound = False
        self._resolved_empty = False

        if first is not None:
            self.set_first(first)
        if last is not None:
            self.set_last(last)

    # -- Mutators ---------------------------------------------------------------

    def set_first(self, first: int) -> None:
        """Bind the first index.

        Raises:
            RangeIsSuffix: If ``first`` is negative.
            RangeInvalid: If the last index is bound and smaller than ``first``.
        """
        if first < 0:
            raise RangeIsSuffix()
        if self._last_bound and first > self._last:
            raise RangeInvalid()
        self._first = first
        self._first_bound = True
        self._resolved_empty = False

    def set_last(self, last: int) -> None:
        """Bind the last index.

        A negative value while the first index is unbound marks a suffix of
        ``-last`` items.

        Raises:
            RangeInvalid: If the first index is bound and greater than ``last``.
        """
        if self._first_bound and last < self._first:
            raise RangeInvalid()
        self._last = last
        self._last_bound = True
        self._resolved_empty = False

    def constrain(self, size: int) -> None:
        """Resolve the range in place against a collection of ``size`` items.

        Suffix and open-ended ranges become fixed ranges; a last index past the
        end of the collection is clamped to it. Calling this again with the
        same size is a no-op.

        Args:
            size: Number of items in the collection.

        Raises:
            ValueError: If ``size`` is negative.
            RangeUnsatisfiableZeroLength: If a non-suffix range is constrained
                to an empty collection.
            RangeOutsideConstraints: If the first index lies past the end of
                the collection.
        """
        if size < 0:
            raise ValueError(f"collection size must be non-negative, got {size}")

        if size == 0:
            if not self._first_bound:
                self._last = 0
                self._last_bound = True
                self._resolved_empty = True
                return
            raise RangeUnsatisfiableZeroLength()

        self._resolved_empty = False
        if not self._first_bound:
            if self._last_bound and self._last >= 0:
                # Only an end index: everything up to it.
                self._first = 0
                self._last = min(self._last, size - 1)
            else:
                suffix = self._last if self._last_bound else -size
                self._first = max(size + suffix, 0)
                self._last = size - 1
            self._first_bound = True
            self._last_bound = True
            return

        if self._first > size - 1:
            raise RangeOutsideConstraints()

        if not self._last_bound or self._last > size - 1:
            self._last = size - 1
            self._last_bound = True

    def set_total(self, total: int) -> None:
        """Constrain the range to ``total`` items and record the total.

        The total is only recorded when ``constrain`` succeeds; its errors
        propagate unchanged.
        """
        self.constrain(total)
        self._total = total
        self._total_bound = True

    # -- Accessors --------------------------------------------------------------

    @property
    def units(self) -> str:
        return self._units

    @property
    def first(self) -> int:
        return self._first if self._first_bound else RANGE_UNCONSTRAINED

    @property
    def last(self) -> int:
        return self._last if self._last_bound else RANGE_UNCONSTRAINED

    @property
    def total(self) -> int:
        return self._total if self._total_bound else RANGE_UNCONSTRAINED

    @property
    def offset(self) -> int:
        """Index of the first item, or ``RANGE_UNCONSTRAINED``."""
        return self.first

    @property
    def limit(self) -> int:
        """Span of the range.

        ``last - first`` for a fixed range, the suffix length for a suffix
        range (0 once resolved against an empty collection), and
        ``RANGE_UNCONSTRAINED`` otherwise.
        """
        if self.is_fixed:
            return self._last - self._first
        if self._last_bound and self._last <= 0:
            return -self._last
        return RANGE_UNCONSTRAINED

    @property
    def is_suffix(self) -> bool:
        return not self._first_bound

    @property
    def is_fixed(self) -> bool:
        return self._first_bound and self._last_bound

    @property
    def is_unbounded(self) -> bool:
        return not self._first_bound or not self._last_bound

    @property
    def is_full_range(self) -> bool:
        return self._first_bound and self._first == 0 and not self._last_bound

    @property
    def is_empty(self) -> bool:
        """True for a suffix range resolved against an empty collection."""
        return self._resolved_empty

    def contains(self, offset: int) -> bool:
        """Report whether ``offset`` falls inside the range.

        A negative ``offset`` is a distance from the end of the range.
        """
        if offset < 0:
            if not self._first_bound or not self._last_bound:
                return False
            return self._last >= -offset
        if not self.is_fixed:
            return False
        return self._first <= offset <= self._last

    def as_slice(self) -> slice:
        """Return a ``slice`` selecting the range from a sequence.

        Raises:
            RangeFormatError: If the range has not been resolved.
        """
        if self.is_empty:
            return slice(0, 0)
        if not self.is_fixed:
            raise RangeFormatError("range must be constrained before slicing")
        return slice(self._first, self._last + 1)

    # -- Formatting -------------------------------------------------------------

    def format(self) -> str:
        """Render the range as the body of a ``Content-Range`` header.

        Returns:
            ``"<units> <first>-<last>/<total>"`` where the total is ``*`` when
            unknown, or ``"<units> */<total>"`` when neither bound is set.

        Raises:
            RangeFormatError: If exactly one of the bounds is set.
        """
        max_ = str(self._total) if self._total_bound else "*"

        if (not self._first_bound and not self._last_bound) or self.is_empty:
            return f"{self._units} */{max_}"

        if self._first_bound != self._last_bound:
            raise RangeFormatError(
                f"one or more bounds unset: first={self._first_bound} last={self._last_bound}"
            )

        return f"{self._units} {self._first}-{self._last}/{max_}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentRange):
            return NotImplemented
        return (
            self._units == other._units
            and self.first == other.first
            and self.last == other.last
            and self.total == other.total
        )

    def __repr__(self) -> str:
        return (
            f"ContentRange(units={self._units!r}, first={self.first}, "
            f"last={self.last}, total={self.total})"
        )


def format_unsatisfied(units: str, total: int) -> str:
    """Render the ``Content-Range`` body sent with a 416 response."""
    return f"{units} */{total}"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_UNIT_SPEC_RE = re.compile(r"(?P<units>[^=]*)=(?P<rest>.*)", re.DOTALL)
_RANGE_VALUE_RE = re.compile(r"(?P<sign>-?)(?P<digits>[0-9]+)")


def parse_range(header: str) -> ContentRange:
    """Parse a ``Range`` request header into a ``ContentRange``.

    Accepts ``unit=first-last``, ``unit=first-`` (or ``unit=first``) and
    ``unit=-suffix``. The unit token is kept verbatim.

    Args:
        header: The Range header value, e.g. "resources=0-99".

    Returns:
        An unconstrained ``ContentRange``.

    Raises:
        RangeInvalid: If the header is malformed, has trailing input, or
            names a first index greater than its last.
        RangeIsSuffix: If a suffix is followed by a last index.
    """
    units, rest = _expect_unit_specifier(header.strip())
    rng = ContentRange(units)

    negative, value, rest = _expect_range_value(rest)
    # "-0" is zero, not a suffix.
    if negative and value > 0:
        if rest:
            raise RangeIsSuffix()
        rng.set_last(-value)
        return rng

    rng.set_first(value)
    if not rest:
        return rng

    rest, found = _expect_separator(rest, "-")
    if found and rest:
        is_suffix, value, rest = _expect_range_value(rest)
        rng.set_last(-value if is_suffix else value)

    if rest:
        raise RangeInvalid(f"unexpected trailing input in range: {rest!r}")

    logger.debug("Parsed range %r as %r", header, rng)
    return rng


def _expect_unit_specifier(s: str) -> tuple[str, str]:
    m = _UNIT_SPEC_RE.fullmatch(s)
    if m is None or not m.group("units"):
        raise RangeInvalid(f"range is missing a unit specifier: {s!r}")
    return m.group("units"), m.group("rest")


def _expect_range_value(s: str) -> tuple[bool, int, str]:
    """Read an optionally signed run of digits from the front of ``s``.

    Returns:
        (negative, magnitude, rest)
    """
    m = _RANGE_VALUE_RE.match(s)
    if m is None:
        raise RangeInvalid(f"expected a range value: {s!r}")
    return m.group("sign") == "-", int(m.group("digits")), s[m.end():]


def _expect_separator(s: str, sep: str) -> tuple[str, bool]:
    if s.startswith(sep):
        return s[len(sep):], True
    return s, False
