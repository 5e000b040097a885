"""
Error taxonomy for chart computation.

Every failure the engine reports is a ChartError. Callers that only care
whether the input was usable can catch ChartError (or ValueError); the
subclasses say which stage rejected it.
"""


class ChartError(ValueError):
    """Base class for all chart computation failures."""


class InputError(ChartError):
    """Malformed birth data: date/time strings, coordinates, or flags."""


class CalendarError(ChartError):
    """The calendar oracle could not resolve the requested date."""
