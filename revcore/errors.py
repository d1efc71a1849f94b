"""
Error taxonomy for the revenue engine.

- InvalidInput: the caller handed over something the engine refuses to
  interpret (negative quantity, unknown billing cycle, target < 0).
- InconsistentState: the entity graph contradicts itself (a revenue stream
  pointing at a missing contract, duplicate client ids in a snapshot).

Both are ValueErrors so existing `except ValueError` call sites keep working.
"""


class RevenueEngineError(ValueError):
    """Base class for all errors raised by the revenue engine."""

    error_type = "revenue_engine_error"


class InvalidInput(RevenueEngineError):
    """Input is malformed or outside the accepted domain."""

    error_type = "invalid_input"


class InconsistentState(RevenueEngineError):
    """Entity graph is internally inconsistent; never repaired silently."""

    error_type = "inconsistent_state"
