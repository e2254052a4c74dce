"""Error types raised by strata.

Only InvalidRatioError is a normal, recoverable outcome. The others
signal misuse or a broken invariant and are not meant to be caught in
regular operation.
"""


class StrataError(Exception):
    """Base class for all strata errors."""


class InvalidRatioError(StrataError, ValueError):
    """Raised when a store is configured with a ratio below 1."""

    def __init__(self, ratio):
        super().__init__(f"ratio must be an integer >= 1, got {ratio!r}")
        self.ratio = ratio


class InvariantViolation(StrataError, RuntimeError):
    """A chain was found in a state the cascade can never produce."""


class TickOrderError(StrataError, ValueError):
    """A merge would put the newer value on the left."""

    def __init__(self, left_tick: int, right_tick: int):
        super().__init__(
            f"merge out of order: left tick {left_tick} "
            f"is not older than right tick {right_tick}")
        self.left_tick = left_tick
        self.right_tick = right_tick


class NullValueError(StrataError, ValueError):
    """None was inserted. None is what last() reports for an empty store."""

    def __init__(self):
        super().__init__("None cannot be stored: it is reserved for 'empty'")
