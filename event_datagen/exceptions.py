"""
Exceptions raised by the event generators
"""


class DatagenError(Exception):
    """Base class for data generator errors"""


class InvalidConfigurationError(DatagenError, ValueError):
    """Raised when generator configuration is missing or inconsistent"""


class EmptyInputError(DatagenError, ValueError):
    """Raised when a random pick is requested from an empty list"""
