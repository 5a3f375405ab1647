#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
CRM integration package for the Bark Lead Decoder.

Provides the mapping from decoded leads to contact payloads and the sink that
hands them to a contact repository.
"""

from bark_lead_decoder.crm.contact_mapper import ContactMapper
from bark_lead_decoder.crm.sink import ContactRepository, ContactSink

__all__ = ["ContactMapper", "ContactRepository", "ContactSink"]
