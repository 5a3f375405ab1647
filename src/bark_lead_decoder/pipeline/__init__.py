"""
Pipeline module for the Bark Lead Decoder.

This module contains the orchestration of the decoding stages, from card
segmentation through to contact storage.
"""

from bark_lead_decoder.pipeline.decode_pipeline import (
    LeadDecodePipeline,
    PipelineMetrics,
    PipelineStage,
    process_and_store_bark_leads,
)

__all__ = [
    "LeadDecodePipeline",
    "PipelineMetrics",
    "PipelineStage",
    "process_and_store_bark_leads",
]
