"""
Contact Sink - Persists accepted leads through a contact repository.

Each lead is written on its own: a failed write is logged with the lead's
name and source and counted, and the remaining leads are still stored.
"""

import logging
from typing import Iterable, Optional, Protocol, Tuple

from bark_lead_decoder.crm.contact_mapper import ContactMapper
from bark_lead_decoder.models.contact import Contact, ContactCreate
from bark_lead_decoder.models.lead import ExtractedLead
from bark_lead_decoder.utils.logger import log_sensitive

logger = logging.getLogger(__name__)


class ContactRepository(Protocol):
    """Persistence collaborator that creates CRM contacts."""

    def create_contact(self, fields: ContactCreate) -> Contact:
        ...


class ContactSink:
    """Writes leads to a ContactRepository one at a time."""

    def __init__(self, repository: ContactRepository, mapper: Optional[ContactMapper] = None):
        """
        Args:
            repository: Contact persistence collaborator
            mapper: Lead to contact mapper (default US mapper if None)
        """
        self.repository = repository
        self.mapper = mapper or ContactMapper()

    def store_lead(self, lead: ExtractedLead, user_id: Optional[int] = None) -> Contact:
        """Map and persist a single lead; repository errors propagate."""
        contact = self.repository.create_contact(self.mapper.map_lead(lead, user_id))
        phone = lead.phones.best()
        log_sensitive(
            logger,
            logging.INFO,
            f"Stored: {lead.full_name} ({lead.business_name}) - {phone or 'No phone'}",
            phone=phone,
        )
        return contact

    def store(self, leads: Iterable[ExtractedLead], user_id: Optional[int] = None) -> Tuple[int, int]:
        """
        Persist leads, isolating failures per lead.

        Args:
            leads: Leads already accepted by the validator
            user_id: User recorded as the creator of the contacts

        Returns:
            Tuple of (stored count, failed count)
        """
        stored_count = 0
        failed_count = 0

        for lead in leads:
            try:
                self.store_lead(lead, user_id)
                stored_count += 1
            except Exception as e:
                failed_count += 1
                logger.error(
                    f"Error storing lead {lead.full_name} from {lead.profile_url or self.mapper.source_tag}: {e}"
                )

        logger.info(f"Stored {stored_count} leads, {failed_count} failed")
        return stored_count, failed_count
