"""
Reconciliation - merges both model passes into the final analysis
"""

from typing import List, Optional

from .models import ClassificationResult, FieldExtractionResult, ReconciledAnalysis
from .schemas import CertificateTypeSchema


class Reconciler:
    """Pure merge of classification and extraction results (no I/O)"""

    def reconcile(
        self,
        classification: ClassificationResult,
        field_result: Optional[FieldExtractionResult] = None,
        schema: Optional[CertificateTypeSchema] = None,
    ) -> ReconciledAnalysis:
        """
        Build the externally visible analysis

        missing_required follows the schema: required fields whose value
        is null. The model's own list is kept as model_reported_missing.
        """
        if classification.is_unknown or field_result is None or schema is None:
            return self.unknown(classification)

        extracted = {
            name: field_result.extracted_fields.get(name)
            for name in schema.field_names
        }

        return ReconciledAnalysis(
            is_recognized=True,
            detected_type=classification.detected_type,
            type_confidence=classification.confidence,
            reason=classification.reason,
            certificate_type=schema.display_name,
            table_name=schema.storage_table,
            section_code=schema.section_code,
            extracted=extracted,
            field_confidence=dict(field_result.field_confidence),
            overall_confidence=classification.confidence,
            missing_required=missing_required_fields(extracted, schema),
            model_reported_missing=list(field_result.missing_required),
        )

    @staticmethod
    def unknown(classification: ClassificationResult) -> ReconciledAnalysis:
        return ReconciledAnalysis(
            is_recognized=False,
            detected_type=classification.detected_type,
            type_confidence=classification.confidence,
            reason=classification.reason or "Could not identify document type",
            extracted={},
            field_confidence={},
            overall_confidence=classification.confidence,
            missing_required=[],
        )


def missing_required_fields(extracted: dict, schema: CertificateTypeSchema) -> List[str]:
    return [name for name in schema.required_fields if extracted.get(name) is None]
