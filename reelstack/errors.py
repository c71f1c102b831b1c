"""
errors.py: exception types raised by reelstack
"""


class ReelstackError(Exception):
    """Base class for every error reelstack raises on purpose."""


class ConfigurationError(ReelstackError):
    """
    Raised when a required reference is missing, a descriptor is amended out
    of order, or configuration input cannot be used.
    """
