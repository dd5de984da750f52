"""
Prompt builders for the two model passes
"""

import json
from typing import List

from .registry import CertificateRegistry, UNKNOWN_TYPE
from .schemas import CertificateTypeSchema

CLASSIFICATION_CHAR_LIMIT = 3000


def build_classification_prompt(
    text: str,
    registry: CertificateRegistry,
    char_limit: int = CLASSIFICATION_CHAR_LIMIT,
) -> str:
    """
    Pass 1 prompt: pick one registered type (or UNKNOWN)

    Only the opening of the document is sent; its structure is enough to
    tell the categories apart.
    """
    categories = "\n".join(
        f"{i}. {schema.type_key}: {schema.classifier_hint}."
        for i, schema in enumerate(registry, start=1)
    )
    keyword_lines = "\n".join(
        f"- {schema.type_key}: " + ", ".join(f'"{kw}"' for kw in schema.keywords)
        for schema in registry
        if schema.keywords
    )
    type_choices = " | ".join(f'"{key}"' for key in registry.type_keys + [UNKNOWN_TYPE])

    return f"""You are an expert academic document classifier. Analyze the following text extracted from a certificate or document and IDENTIFY the document type.

Text Content:
\"\"\"
{text[:char_limit]}
\"\"\"

Classification Categories:
{categories}

Distinguishing keywords:
{keyword_lines}

Instructions:
- Look for the keywords above to tell the categories apart, e.g. participation or completion wording versus having delivered a talk.
- If the document is a membership card, select MEMBERSHIP.
- If none of the categories fit, answer UNKNOWN.
- Return a JSON object with the detected type and confidence.

Output JSON:
{{
  "detected_type": {type_choices},
  "confidence": 0.0 to 1.0,
  "reason": "Brief explanation of why this type was chosen based on keywords found in the text."
}}"""


def _extraction_rules(schema: CertificateTypeSchema) -> List[str]:
    names = set(schema.field_names)
    rules = []

    if "participant_name" in names:
        rules.append(
            '**participant_name**: Look for the name of the person receiving the certificate. '
            'Often follows "This is to certify that", "Presented to", or is printed in a large font.'
        )
    if "academic_year" in names:
        rules.append(
            '**academic_year**: Inferred from the date. The academic year starts on 1 July: '
            'a date on or after 1 July of year Y belongs to "Y-(Y+1)", a date before 1 July of year Y '
            'belongs to "(Y-1)-Y". Example: a date between July 2023 and June 2024 is "2023-24". '
            'Format MUST be YYYY-YY.'
        )
    if "date" in names:
        rules.append(
            '**date**: Extract the main event date in YYYY-MM-DD format. If a range is given, use the start date.'
        )
    if "duration_days" in names:
        rules.append(
            '**duration_days**: Calculate the number of days if start and end dates are present, '
            'counting both ends. If only duration in weeks is given, convert to days (weeks * 7).'
        )
    if "duration_weeks" in names:
        rules.append('**duration_weeks**: The course length in weeks, as a number.')
    if "organizer" in names:
        rules.append('**organizer**: The name of the institution or organization conducting the event.')
    if "mode" in names:
        rules.append(
            '**mode**: Infer if the event was "Online" or "Offline" based on context '
            '(e.g., location, platform names like Zoom).'
        )

    for spec in schema.fields:
        if spec.options and spec.name != "mode":
            rules.append(f'**{spec.name}**: One of {", ".join(spec.options)}.')

    rules.append("Return null for any field that is completely missing. Do not guess.")
    return [f"{i}. {rule}" for i, rule in enumerate(rules, start=1)]


def build_extraction_prompt(text: str, schema: CertificateTypeSchema) -> str:
    """
    Pass 2 prompt: pull the schema's fields out of the full document text
    """
    fields_json = json.dumps(list(schema.field_names))
    example_fields = ",\n    ".join(f'"{name}": ...' for name in schema.field_names)
    example_confidence = ",\n    ".join(f'"{name}": 0.0 to 1.0' for name in schema.field_names)
    rules = "\n".join(_extraction_rules(schema))

    return f"""You are an expert data entry specialist. Extract the following information from the provided academic certificate text.

Target Document Type: "{schema.display_name}"
Fields to Extract: {fields_json}

Document Text:
\"\"\"
{text}
\"\"\"

Extraction Rules:
{rules}

Output Format:
Return a valid JSON object matching this structure:
{{
  "extracted_fields": {{
    {example_fields}
  }},
  "field_confidence": {{
    {example_confidence}
  }},
  "missing_required": ["names of fields that could not be found"]
}}"""
