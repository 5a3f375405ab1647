"""
Storage package for the Bark Lead Decoder.
"""

from bark_lead_decoder.storage.contact_store import ContactStore

__all__ = ["ContactStore"]
