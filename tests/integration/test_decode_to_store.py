#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Integration tests decoding pages into a real SQLite contact store.
"""

import pytest

from bark_lead_decoder.locales import UK_LOCALE, US_LOCALE
from bark_lead_decoder.pipeline import LeadDecodePipeline, process_and_store_bark_leads
from bark_lead_decoder.storage.contact_store import ContactStore

pytestmark = pytest.mark.integration


@pytest.fixture
def store(temp_db_path):
    return ContactStore(db_path=temp_db_path)


def test_sample_card_becomes_contact(store, sample_card_html):
    result = process_and_store_bark_leads(
        {"html": sample_card_html, "url": "https://www.bark.com/en/gb/marketing/"},
        user_id=5,
        repository=store,
        locale=UK_LOCALE,
    )

    assert result.stored_count == 1

    contacts, total = store.list_contacts()
    assert total == 1

    contact = contacts[0]
    assert contact.first_name == "Sarah"
    assert contact.last_name == "Thompson"
    assert contact.company == "Thompson Marketing Solutions"
    assert contact.phone == "+44 78 1234 5678"
    assert contact.email == "sarah@thompsonmarketing.co.uk"
    assert contact.position == "Business Owner"
    assert contact.lead_status == "new"
    assert contact.created_by == 5
    assert contact.tags[:3] == ["Digital Marketing", "bark.com", "verified"]
    assert "Rating: 4.9/5 (47 reviews)" in contact.notes
    assert "Estimated Value: £5,720" in contact.notes


def test_directory_page_counts(store, directory_html):
    pipeline = LeadDecodePipeline(repository=store, locale=US_LOCALE)

    result = pipeline.process_and_store(directory_html)

    assert (result.stored_count, result.rejected_count, result.failed_count) == (2, 1, 0)
    assert store.count_contacts_by_status() == {"new": 2}

    names = sorted(f"{c.first_name} {c.last_name}" for c in store.list_contacts()[0])
    assert names == ["James Wilson", "Sarah Thompson"]


def test_reimport_creates_new_contacts(store, directory_html):
    pipeline = LeadDecodePipeline(repository=store, locale=US_LOCALE)

    pipeline.process_and_store(directory_html)
    pipeline.process_and_store(directory_html)

    assert store.list_contacts()[1] == 4
