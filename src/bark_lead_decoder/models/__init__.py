"""
Data models for the Bark Lead Decoder.
"""

from bark_lead_decoder.models.lead import (
    DecodeResult,
    ExtractedLead,
    PersonName,
    PhoneNumbers,
    ProviderCardFragment,
    RawDocument,
    VerificationStatus,
)
from bark_lead_decoder.models.contact import Contact, ContactCreate

__all__ = [
    "Contact",
    "ContactCreate",
    "DecodeResult",
    "ExtractedLead",
    "PersonName",
    "PhoneNumbers",
    "ProviderCardFragment",
    "RawDocument",
    "VerificationStatus",
]
