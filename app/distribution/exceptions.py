"""Errors raised while dispatching distribution reports."""
from __future__ import annotations


class DistributionError(Exception):
    """Base class for distribution dispatch failures."""


class ValidationError(DistributionError):
    """Raised when required request data is missing or empty."""


class FormattingError(DistributionError):
    """Raised when a friend's report text cannot be produced."""


class RenderingError(DistributionError):
    """Raised when the PDF renderer fails for a report."""


class TransportError(DistributionError):
    """Raised when the mail transport rejects or fails to deliver a message."""
