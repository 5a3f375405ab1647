"""
Validation components for the Bark Lead Decoder.
"""

from bark_lead_decoder.validation.lead_validator import LeadValidator, ValidationLevel, ValidationResult

__all__ = ["LeadValidator", "ValidationLevel", "ValidationResult"]
