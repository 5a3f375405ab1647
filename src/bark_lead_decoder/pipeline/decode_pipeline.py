"""
Decode Pipeline - Core orchestration component for lead decoding.

This module connects the decoding stages for one directory page at a time:
card segmentation, field extraction, scoring, validation and storage. Data
only flows forward; a miss at any stage yields defaults or a rejection, never
an error, and a failed write only affects the lead being written.
"""

import os
import time
import json
import logging
from enum import Enum
from datetime import datetime
from functools import partial
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Any, Optional, Callable, Union

from bark_lead_decoder.config import AppConfig, config as default_app_config
from bark_lead_decoder.crm.contact_mapper import ContactMapper
from bark_lead_decoder.crm.sink import ContactRepository, ContactSink
from bark_lead_decoder.decoder.extractor import FieldExtractor
from bark_lead_decoder.decoder.phones import PhoneExtractor
from bark_lead_decoder.decoder.segmenter import CardSegmenter
from bark_lead_decoder.locales import Locale
from bark_lead_decoder.models.lead import (
    DecodeResult,
    ExtractedLead,
    ProviderCardFragment,
    RawDocument,
)
from bark_lead_decoder.scoring.scorer import LeadScorer
from bark_lead_decoder.storage.contact_store import ContactStore
from bark_lead_decoder.utils.logger import log_processing_event
from bark_lead_decoder.utils.timeout import timeout_handler
from bark_lead_decoder.validation.lead_validator import LeadValidator

# Set up logger
logger = logging.getLogger(__name__)

ENV_PREFIX = "BARK_DECODER_PIPELINE_"

RawInput = Union[RawDocument, Dict[str, Any], str]


class PipelineStage(Enum):
    """Enumeration of pipeline stages for tracking."""
    SEGMENTATION = "segmentation"
    EXTRACTION = "extraction"
    SCORING = "scoring"
    VALIDATION = "validation"
    STORAGE = "storage"


class PipelineMetrics:
    """Class for tracking and reporting pipeline metrics."""

    def __init__(self):
        self.start_time: datetime = datetime.now()
        self.end_time: Optional[datetime] = None
        self.cards_found: int = 0
        self.leads_extracted: int = 0
        self.leads_valid: int = 0
        self.leads_rejected: int = 0
        self.leads_stored: int = 0
        self.store_failures: int = 0
        self.stage_timings: Dict[PipelineStage, float] = {stage: 0.0 for stage in PipelineStage}
        self.error_counts: Dict[str, int] = {}

    def record_stage_time(self, stage: PipelineStage, execution_time: float) -> None:
        """Record the execution time for a pipeline stage."""
        self.stage_timings[stage] += execution_time

    def record_error(self, error_type: str) -> None:
        """Record an error occurrence by type."""
        if error_type not in self.error_counts:
            self.error_counts[error_type] = 0
        self.error_counts[error_type] += 1

    def finalize(self) -> None:
        """Finalize metrics collection, recording end time."""
        self.end_time = datetime.now()

    def get_execution_time(self) -> float:
        """Get the total execution time in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return (datetime.now() - self.start_time).total_seconds()

    def get_report(self) -> Dict[str, Any]:
        """Generate a metrics report."""
        if self.end_time is None:
            self.finalize()

        return {
            'execution_time_seconds': self.get_execution_time(),
            'cards_found': self.cards_found,
            'leads': {
                'extracted': self.leads_extracted,
                'valid': self.leads_valid,
                'rejected': self.leads_rejected,
                'stored': self.leads_stored,
                'failed': self.store_failures,
                'acceptance_rate': (self.leads_valid / self.leads_extracted)
                                   if self.leads_extracted > 0 else 0,
            },
            'stage_timings': {stage.value: timing for stage, timing in self.stage_timings.items()},
            'error_counts': self.error_counts,
        }


class LeadDecodePipeline:
    """
    Central orchestration component for decoding provider pages into contacts.

    Each decode call is independent; the only state shared between calls is
    the contact repository.
    """

    def __init__(self,
                 repository: Optional[ContactRepository] = None,
                 locale: Optional[Locale] = None,
                 segmenter: Optional[CardSegmenter] = None,
                 extractor: Optional[FieldExtractor] = None,
                 scorer: Optional[LeadScorer] = None,
                 validator: Optional[LeadValidator] = None,
                 mapper: Optional[ContactMapper] = None,
                 app_config: Optional[AppConfig] = None,
                 config_override: Optional[Dict[str, Any]] = None):
        """
        Initialize the decode pipeline.

        Args:
            repository: Contact repository. A ContactStore is created on first
                use if not provided.
            locale: Market locale (defaults to the configured locale).
            segmenter: Optional CardSegmenter instance.
            extractor: Optional FieldExtractor instance.
            scorer: Optional LeadScorer instance.
            validator: Optional LeadValidator instance.
            mapper: Optional ContactMapper instance.
            app_config: Application configuration (defaults to the global config).
            config_override: Optional configuration overrides.
        """
        self.app_config = app_config or default_app_config
        self._load_configuration(config_override)

        self.locale = locale or self.app_config.get_locale()
        self.segmenter = segmenter or CardSegmenter()
        self.extractor = extractor or FieldExtractor(
            locale=self.locale,
            phone_extractor=PhoneExtractor(
                self.locale,
                scoped_context=self.config['scoped_phone_context'],
                context_window=self.config['phone_context_window'],
            ),
            max_services=self.config['max_services'],
        )
        self.scorer = scorer or LeadScorer(self.locale)
        self.validator = validator or LeadValidator(self.locale)
        self.mapper = mapper or ContactMapper(self.locale, source_tag=self.config['lead_source_tag'])
        self.repository = repository
        self.metrics = PipelineMetrics()

        logger.debug(f"Lead decode pipeline initialized with configuration: {self.config}")

    def _load_configuration(self, config_override: Optional[Dict[str, Any]] = None) -> None:
        """
        Load pipeline configuration from the app config and apply overrides.

        Args:
            config_override: Optional configuration overrides.
        """
        default_config: Dict[str, Any] = {
            'max_workers': self.app_config.max_workers,
            'processing_timeout_seconds': self.app_config.processing_timeout_seconds,
            'scoped_phone_context': self.app_config.scoped_phone_context,
            'phone_context_window': self.app_config.phone_context_window,
            'max_services': self.app_config.max_services,
            'lead_source_tag': self.app_config.lead_source_tag,
            'default_user_id': self.app_config.default_user_id,
        }

        # Apply overrides
        if config_override:
            default_config.update(config_override)

        # Apply environment variable overrides
        for key in default_config:
            env_var = f"{ENV_PREFIX}{key.upper()}"
            if env_var in os.environ:
                try:
                    value = os.environ[env_var]
                    if isinstance(default_config[key], bool):
                        default_config[key] = value.lower() in ('true', 'yes', '1')
                    elif isinstance(default_config[key], int):
                        default_config[key] = int(value)
                    elif isinstance(default_config[key], dict):
                        try:
                            default_config[key] = json.loads(value)
                        except json.JSONDecodeError:
                            logger.warning(f"Failed to parse JSON from environment variable {env_var}")
                    else:
                        default_config[key] = value
                except (ValueError, TypeError) as e:
                    logger.warning(f"Failed to parse environment variable {env_var}: {e}")

        self.config = default_config

    def _get_repository(self) -> ContactRepository:
        if self.repository is None:
            self.repository = ContactStore(db_path=self.app_config.db_path)
        return self.repository

    def _timed_execution(self, stage: PipelineStage, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a function with timing for metrics.

        Args:
            stage: The pipeline stage for metrics tracking.
            func: The function to execute.
            *args: Arguments to pass to the function.
            **kwargs: Keyword arguments to pass to the function.

        Returns:
            The result of the function execution.
        """
        start_time = time.time()
        result = func(*args, **kwargs)
        execution_time = time.time() - start_time

        self.metrics.record_stage_time(stage, execution_time)
        logger.debug(f"Executed stage {stage.value} in {execution_time:.4f}s")

        return result

    @staticmethod
    def coerce_document(raw: RawInput) -> RawDocument:
        """
        Accept a RawDocument, a ``{html, url, timestamp}`` mapping or bare HTML.
        """
        if isinstance(raw, RawDocument):
            return raw
        if isinstance(raw, dict):
            data = {'html': raw.get('html', '')}
            source_url = raw.get('source_url', raw.get('url'))
            if source_url:
                data['source_url'] = source_url
            fetched_at = raw.get('fetched_at', raw.get('timestamp'))
            if fetched_at:
                data['fetched_at'] = fetched_at
            return RawDocument(**data)
        return RawDocument(html=raw)

    def _extract_all(self, fragments: List[ProviderCardFragment], source_url: str) -> List[ExtractedLead]:
        """Extract leads from fragments, keeping document order."""
        extract = partial(self.extractor.extract, source_url=source_url)
        max_workers = self.config.get('max_workers', 1)

        if max_workers > 1 and len(fragments) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                return list(executor.map(extract, fragments))

        return [extract(fragment) for fragment in fragments]

    def _decode_document(self, document: RawDocument) -> List[ExtractedLead]:
        fragments = self._timed_execution(
            PipelineStage.SEGMENTATION,
            self.segmenter.segment,
            document.html
        )
        self.metrics.cards_found = len(fragments)
        logger.info(f"Found {len(fragments)} provider cards in {document.source_url or 'document'}")

        leads = self._timed_execution(
            PipelineStage.EXTRACTION,
            self._extract_all,
            fragments,
            document.source_url
        )

        leads = self._timed_execution(
            PipelineStage.SCORING,
            lambda items: [self.scorer.enrich(lead) for lead in items],
            leads
        )
        self.metrics.leads_extracted = len(leads)

        for lead in leads:
            logger.debug(f"Decoded {lead.full_name} ({lead.business_name}): "
                         f"score {lead.lead_score}, value {lead.estimated_value}")

        return leads

    def _run_decode(self, document: RawDocument) -> List[ExtractedLead]:
        timeout = self.config.get('processing_timeout_seconds', 0)
        if timeout and timeout > 0:
            return timeout_handler(timeout)(self._decode_document)(document)
        return self._decode_document(document)

    def decode(self, raw: RawInput) -> List[ExtractedLead]:
        """
        Decode every provider card in a document.

        Args:
            raw: Document to decode.

        Returns:
            All decoded and scored leads in document order, valid or not.

        Raises:
            DecodeTimeoutError: If a processing timeout is configured and exceeded.
        """
        self.metrics = PipelineMetrics()
        document = self.coerce_document(raw)

        try:
            leads = self._run_decode(document)
        except Exception as e:
            self.metrics.record_error(type(e).__name__)
            raise
        finally:
            self.metrics.finalize()

        log_processing_event("decoder", "decoded",
                             f"{len(leads)} leads from {document.source_url or 'document'}")
        return leads

    def _filter_valid(self, leads: List[ExtractedLead]) -> List[ExtractedLead]:
        valid_leads = []
        for lead in leads:
            is_valid, messages = self.validator.validate_lead(lead)
            if is_valid:
                valid_leads.append(lead)
            else:
                logger.info(f"Lead rejected: {lead.full_name} ({'; '.join(messages)})")
        return valid_leads

    def process_and_store(self, raw: RawInput, user_id: Optional[int] = None) -> DecodeResult:
        """
        Decode a document and store the leads that pass validation.

        Args:
            raw: Document to decode.
            user_id: User recorded as creator of the contacts (defaults to
                the configured user).

        Returns:
            DecodeResult: All decoded leads plus stored/rejected/failed counts.
        """
        self.metrics = PipelineMetrics()
        document = self.coerce_document(raw)
        if user_id is None:
            user_id = self.config.get('default_user_id')

        log_processing_event("decoder", "start", f"Processing {document.source_url or 'document'}")

        try:
            leads = self._run_decode(document)

            valid_leads = self._timed_execution(PipelineStage.VALIDATION, self._filter_valid, leads)
            self.metrics.leads_valid = len(valid_leads)
            self.metrics.leads_rejected = len(leads) - len(valid_leads)

            stored_count, failed_count = 0, 0
            if valid_leads:
                sink = ContactSink(self._get_repository(), self.mapper)
                stored_count, failed_count = self._timed_execution(
                    PipelineStage.STORAGE,
                    sink.store,
                    valid_leads,
                    user_id
                )
            self.metrics.leads_stored = stored_count
            self.metrics.store_failures = failed_count
            if failed_count:
                self.metrics.error_counts['store_failure'] = failed_count
        except Exception as e:
            self.metrics.record_error(type(e).__name__)
            log_processing_event("decoder", "error", f"Processing failed: {e}", logging.ERROR)
            raise
        finally:
            self.metrics.finalize()

        log_processing_event(
            "decoder",
            "complete",
            f"Processed {len(leads)} leads, stored {stored_count} "
            f"({self.metrics.leads_rejected} rejected, {failed_count} failed)"
        )
        logger.debug(f"Pipeline metrics: {self.metrics.get_report()}")

        return DecodeResult(
            leads=leads,
            stored_count=stored_count,
            rejected_count=self.metrics.leads_rejected,
            failed_count=failed_count,
            source_url=document.source_url,
        )


def process_and_store_bark_leads(raw: RawInput,
                                 user_id: Optional[int] = None,
                                 repository: Optional[ContactRepository] = None,
                                 locale: Optional[Locale] = None,
                                 config_override: Optional[Dict[str, Any]] = None) -> DecodeResult:
    """
    Decode a Bark provider page and store its valid leads.

    Args:
        raw: Document to decode.
        user_id: User recorded as creator of the contacts.
        repository: Contact repository (defaults to the SQLite contact store).
        locale: Market locale (defaults to the configured locale).
        config_override: Optional pipeline configuration overrides.

    Returns:
        DecodeResult: Decoded leads and storage counts.
    """
    pipeline = LeadDecodePipeline(
        repository=repository,
        locale=locale,
        config_override=config_override,
    )
    return pipeline.process_and_store(raw, user_id)
