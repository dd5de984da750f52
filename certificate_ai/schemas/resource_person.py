"""
Schema for resource person / invited talk certificates
"""

from .base import CertificateTypeSchema, FieldSpec


RESOURCE_PERSON_SCHEMA = CertificateTypeSchema(
    type_key="RESOURCE_PERSON",
    display_name="Resource Person / Invited Talk",
    description="Certificate for being a Speaker, Resource Person, Guest Lecturer",
    storage_table="resource_person",
    section_code="6.1.2.1.1",
    classifier_hint="Certificates where the person was a Speaker, Guest Lecturer, Resource Person, or gave an Invited Talk",
    keywords=(
        "delivered a talk",
        "served as resource person",
    ),
    fields=(
        FieldSpec(name="participant_name", label="Name on Certificate", required=True),
        FieldSpec(name="event_name", label="Event Name", required=True),
        FieldSpec(name="role", label="Role (Speaker/Resource Person)"),
        FieldSpec(name="organizer", label="Organizing Institute", required=True),
        FieldSpec(name="date", label="Date", type="date", required=True),
        FieldSpec(name="duration_days", label="Duration (Days)", type="number"),
        FieldSpec(name="mode", label="Mode (Online/Offline)", options=("Online", "Offline")),
        FieldSpec(name="event_type", label="Event Type"),
        FieldSpec(name="location", label="Location"),
        FieldSpec(name="brief_description", label="Brief Description"),
        FieldSpec(name="academic_year", label="Academic Year", required=True),
    ),
)
