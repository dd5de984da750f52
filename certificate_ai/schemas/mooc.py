"""
Schema for MOOC / online course completion certificates
"""

from .base import CertificateTypeSchema, FieldSpec


MOOC_SCHEMA = CertificateTypeSchema(
    type_key="MOOC",
    display_name="MOOC / Online Course",
    description="Online course completion (NPTEL, Coursera, Udemy)",
    storage_table="mooc_course",
    section_code="6.1.4.1",
    classifier_hint="Online course completion certificates (NPTEL, Coursera, Udemy, EdX)",
    keywords=(
        "successfully completed",
        "weeks",
    ),
    fields=(
        FieldSpec(name="participant_name", label="Name on Certificate", required=True),
        FieldSpec(name="course_name", label="Course Name", required=True),
        FieldSpec(name="offering_institute", label="Offering Institute", required=True),
        FieldSpec(name="duration_weeks", label="Duration (Weeks)", type="number"),
        FieldSpec(name="grade_obtained", label="Grade/Score"),
        FieldSpec(name="remarks", label="Remarks"),
        FieldSpec(name="academic_year", label="Academic Year", required=True),
    ),
)
