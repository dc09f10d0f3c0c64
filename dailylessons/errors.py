"""Exceptions raised by DailyLessons."""


class DailyLessonsError(Exception):
    """Base class for all DailyLessons errors."""


class ConfigurationError(DailyLessonsError):
    """Missing or invalid configuration. Fatal at startup."""


class StoreCorruption(DailyLessonsError):
    """The progress file exists but does not hold a valid progress document."""
