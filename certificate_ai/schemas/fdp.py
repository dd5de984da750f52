"""
Schema for Faculty Development Program / training certificates
"""

from .base import CertificateTypeSchema, FieldSpec


FDP_SCHEMA = CertificateTypeSchema(
    type_key="FDP",
    display_name="FDP/Training Program",
    description="Faculty Development Program, STTP, Workshop, or Training Program",
    storage_table="fdp",
    section_code="6.1.2.2.1",
    classifier_hint="Faculty Development Programs, Short Term Training Programs (STTP), Workshops, or Refresher Courses",
    keywords=(
        "participated in",
        "successfully completed",
    ),
    fields=(
        FieldSpec(name="participant_name", label="Name on Certificate", required=True),
        FieldSpec(name="program_name", label="Program/Event Name", required=True),
        FieldSpec(name="organizer", label="Organizing Institute", required=True),
        FieldSpec(name="date", label="Date/Start Date", type="date", required=True),
        FieldSpec(name="duration_days", label="Duration (Days)", type="number"),
        FieldSpec(name="mode", label="Mode (Online/Offline)", options=("Online", "Offline")),
        FieldSpec(name="event_type", label="Event Type"),
        FieldSpec(name="location", label="Location"),
        FieldSpec(name="certificate_number", label="Certificate Number"),
        FieldSpec(name="brief_reflection", label="Brief Description/Reflection"),
        FieldSpec(name="academic_year", label="Academic Year", required=True),
    ),
)
