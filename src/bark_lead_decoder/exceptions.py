"""
Exceptions raised by the lead decoder package.
"""


class LeadDecoderError(Exception):
    """Base exception for lead decoder errors."""
    pass


class DecodeTimeoutError(LeadDecoderError):
    """Raised when processing a document exceeds the configured timeout."""
    pass


class ContactStoreError(LeadDecoderError):
    """Raised when the contact repository fails to persist a contact."""
    pass


class LocaleConfigError(LeadDecoderError):
    """Raised when a locale definition is unknown or malformed."""
    pass


class FetchError(LeadDecoderError):
    """Raised when a source page cannot be downloaded."""
    pass
