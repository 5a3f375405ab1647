"""
Unit tests for the lead decode pipeline.
"""

import os
import time
import unittest
from unittest.mock import MagicMock, patch

import pytest

from bark_lead_decoder.exceptions import ContactStoreError, DecodeTimeoutError
from bark_lead_decoder.locales import UK_LOCALE, US_LOCALE
from bark_lead_decoder.models.contact import Contact, ContactCreate
from bark_lead_decoder.models.lead import RawDocument
from bark_lead_decoder.pipeline.decode_pipeline import (
    LeadDecodePipeline,
    PipelineMetrics,
    PipelineStage,
    process_and_store_bark_leads,
)

PAGE_URL = "https://www.bark.com/en/gb/marketing/manchester/"


def provider_card(name: str, phone: str) -> str:
    return f"""
    <div class="provider-card">
        <h3 class="provider-name">{name}</h3>
        <div class="business-name">{name} Plumbing</div>
        <span class="phone">{phone}</span>
        <div class="location">Leeds</div>
        <div class="service-category">Plumbing</div>
    </div>
    """


def created(fields: ContactCreate) -> Contact:
    return Contact(id=1, **fields.model_dump())


class TestSampleScenario:
    """The single verified marketing card."""

    def test_process_and_store(self, sample_card_html):
        repository = MagicMock()
        repository.create_contact.side_effect = created

        result = process_and_store_bark_leads(
            {"html": sample_card_html, "url": PAGE_URL},
            user_id=7,
            repository=repository,
            locale=UK_LOCALE,
        )

        assert result.stored_count == 1
        assert result.rejected_count == 0
        assert result.failed_count == 0
        assert result.source_url == PAGE_URL

        lead = result.leads[0]
        assert lead.full_name == "Sarah Thompson"
        assert lead.business_name == "Thompson Marketing Solutions"
        assert lead.phones.primary == "+44 78 1234 5678"
        assert lead.phones.mobile == "+44 78 1234 5678"
        assert lead.email == "sarah@thompsonmarketing.co.uk"
        assert lead.is_verified
        assert lead.lead_score >= 90
        assert lead.estimated_value == "£5,720"

        fields = repository.create_contact.call_args[0][0]
        assert fields.phone == "+44 78 1234 5678"
        assert fields.created_by == 7
        assert "Digital Marketing" in fields.tags

    def test_decode_only(self, directory_html):
        pipeline = LeadDecodePipeline(repository=MagicMock(), locale=US_LOCALE)

        leads = pipeline.decode(directory_html)

        assert [lead.full_name for lead in leads] == ["Sarah Thompson", "James Wilson", "Unknown Provider"]
        assert all(lead.estimated_value.startswith("$") for lead in leads)
        pipeline.repository.create_contact.assert_not_called()

    def test_rejected_cards_are_not_stored(self, directory_html):
        repository = MagicMock()
        repository.create_contact.side_effect = created
        pipeline = LeadDecodePipeline(repository=repository, locale=US_LOCALE)

        result = pipeline.process_and_store(RawDocument(html=directory_html, source_url=PAGE_URL))

        assert len(result.leads) == 3
        assert result.stored_count == 2
        assert result.rejected_count == 1
        assert repository.create_contact.call_count == 2

        report = pipeline.metrics.get_report()
        assert report["cards_found"] == 3
        assert report["leads"]["valid"] == 2
        assert report["leads"]["stored"] == 2


class TestLeadDecodePipeline(unittest.TestCase):
    """Test the LeadDecodePipeline class."""

    def setUp(self):
        self.repository = MagicMock()
        self.repository.create_contact.side_effect = created
        self.pipeline = LeadDecodePipeline(repository=self.repository, locale=UK_LOCALE)

    def page(self, count: int) -> str:
        names = ["Ann Lee", "Bo Chan", "Cy Diaz", "Di Eze"]
        numbers = ["0113 496 0001", "0113 496 0002", "0113 496 0003", "0113 496 0004"]
        return "".join(provider_card(names[i], numbers[i]) for i in range(count))

    def test_batch_isolation(self):
        self.repository.create_contact.side_effect = [
            created(ContactCreate(first_name="Ann", last_name="Lee")),
            ContactStoreError("constraint failed"),
            created(ContactCreate(first_name="Cy", last_name="Diaz")),
        ]

        result = self.pipeline.process_and_store(self.page(3), user_id=1)

        self.assertEqual(result.stored_count, 2)
        self.assertEqual(result.failed_count, 1)
        self.assertEqual(result.rejected_count, 0)
        self.assertEqual(self.repository.create_contact.call_count, 3)
        self.assertEqual(self.pipeline.metrics.error_counts, {'store_failure': 1})

    def test_empty_and_garbage_input(self):
        for raw in ("", "<html><body>No results</body></html>", {"html": None}, RawDocument()):
            with self.subTest(raw=raw):
                result = self.pipeline.process_and_store(raw)
                self.assertEqual(result.leads, [])
                self.assertEqual(result.stored_count, 0)
        self.repository.create_contact.assert_not_called()

    def test_default_user_id(self):
        pipeline = LeadDecodePipeline(
            repository=self.repository,
            locale=UK_LOCALE,
            config_override={'default_user_id': 42},
        )
        pipeline.process_and_store(self.page(1))

        fields = self.repository.create_contact.call_args[0][0]
        self.assertEqual(fields.created_by, 42)

    def test_source_tag_override(self):
        pipeline = LeadDecodePipeline(
            repository=self.repository,
            locale=UK_LOCALE,
            config_override={'lead_source_tag': 'bark.co.uk'},
        )
        pipeline.process_and_store(self.page(1))

        fields = self.repository.create_contact.call_args[0][0]
        self.assertEqual(fields.lead_source, "bark.co.uk")
        self.assertIn("bark.co.uk", fields.tags)

    def test_parallel_extraction_keeps_order(self):
        pipeline = LeadDecodePipeline(
            repository=self.repository,
            locale=UK_LOCALE,
            config_override={'max_workers': 4},
        )
        leads = pipeline.decode(self.page(4))

        self.assertEqual([lead.first_name for lead in leads], ["Ann", "Bo", "Cy", "Di"])
        self.assertEqual(leads[2].phones.primary, "+44 11 3496 0003")

    def test_coerce_document(self):
        document = LeadDecodePipeline.coerce_document(
            {"html": "<p></p>", "url": PAGE_URL, "timestamp": "2024-05-01T10:00:00"}
        )
        self.assertEqual(document.source_url, PAGE_URL)
        self.assertEqual(document.fetched_at.year, 2024)

        self.assertEqual(LeadDecodePipeline.coerce_document("<p></p>").html, "<p></p>")

        existing = RawDocument(html="<p></p>")
        self.assertIs(LeadDecodePipeline.coerce_document(existing), existing)

    def test_timeout(self):
        pipeline = LeadDecodePipeline(
            repository=self.repository,
            locale=UK_LOCALE,
            config_override={'processing_timeout_seconds': 1},
        )

        def slow_segment(html):
            time.sleep(3)
            return []

        pipeline.segmenter.segment = slow_segment

        with self.assertRaises(DecodeTimeoutError):
            pipeline.process_and_store(self.page(1))

        self.assertEqual(pipeline.metrics.error_counts, {'DecodeTimeoutError': 1})
        self.repository.create_contact.assert_not_called()

    @patch.dict(os.environ, {
        "BARK_DECODER_PIPELINE_MAX_WORKERS": "3",
        "BARK_DECODER_PIPELINE_SCOPED_PHONE_CONTEXT": "yes",
        "BARK_DECODER_PIPELINE_LEAD_SOURCE_TAG": "bark.ie",
    })
    def test_environment_overrides(self):
        pipeline = LeadDecodePipeline(repository=self.repository, locale=UK_LOCALE)

        self.assertEqual(pipeline.config['max_workers'], 3)
        self.assertTrue(pipeline.config['scoped_phone_context'])
        self.assertTrue(pipeline.extractor.phone_extractor.scoped_context)
        self.assertEqual(pipeline.mapper.source_tag, "bark.ie")

    @patch("bark_lead_decoder.pipeline.decode_pipeline.ContactStore")
    def test_repository_created_on_first_store(self, mock_store_cls):
        mock_store_cls.return_value.create_contact.side_effect = created
        pipeline = LeadDecodePipeline(locale=UK_LOCALE)

        pipeline.decode(self.page(1))
        mock_store_cls.assert_not_called()

        result = pipeline.process_and_store(self.page(1))
        mock_store_cls.assert_called_once()
        self.assertEqual(result.stored_count, 1)


class TestPipelineMetrics(unittest.TestCase):
    """Test the PipelineMetrics class."""

    def test_report(self):
        metrics = PipelineMetrics()
        metrics.leads_extracted = 4
        metrics.leads_valid = 3
        metrics.record_stage_time(PipelineStage.EXTRACTION, 0.5)
        metrics.record_stage_time(PipelineStage.EXTRACTION, 0.25)
        metrics.record_error("ContactStoreError")
        metrics.record_error("ContactStoreError")

        report = metrics.get_report()

        self.assertEqual(report['leads']['acceptance_rate'], 0.75)
        self.assertEqual(report['stage_timings']['extraction'], 0.75)
        self.assertEqual(report['stage_timings']['storage'], 0.0)
        self.assertEqual(report['error_counts'], {'ContactStoreError': 2})
        self.assertGreaterEqual(report['execution_time_seconds'], 0)

    def test_empty_report(self):
        self.assertEqual(PipelineMetrics().get_report()['leads']['acceptance_rate'], 0)


if __name__ == "__main__":
    unittest.main()
