"""
Schema for professional society membership certificates and cards
"""

from .base import CertificateTypeSchema, FieldSpec


MEMBERSHIP_SCHEMA = CertificateTypeSchema(
    type_key="MEMBERSHIP",
    display_name="Professional Membership",
    description="Membership certificate for professional bodies (IEEE, ACM, ISTE)",
    storage_table="prof_memberships",
    section_code="6.1.1.1",
    classifier_hint="Membership cards or certificates for professional societies (IEEE, ACM, ISTE, CSI)",
    keywords=(
        "member",
        "membership number",
    ),
    fields=(
        FieldSpec(name="participant_name", label="Name on Card/Certificate", required=True),
        FieldSpec(name="society_name", label="Society Name", required=True),
        FieldSpec(name="grade_level", label="Grade/Level (e.g., Senior Member, Life Member)"),
        FieldSpec(name="brief_description", label="Brief Description"),
        FieldSpec(name="academic_year", label="Academic Year", required=True),
    ),
)
