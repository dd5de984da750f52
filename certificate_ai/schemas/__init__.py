"""
Certificate type schemas
"""

from .base import CertificateTypeSchema, FieldSpec
from .fdp import FDP_SCHEMA
from .resource_person import RESOURCE_PERSON_SCHEMA
from .membership import MEMBERSHIP_SCHEMA
from .mooc import MOOC_SCHEMA

BUILTIN_SCHEMAS = (
    FDP_SCHEMA,
    RESOURCE_PERSON_SCHEMA,
    MEMBERSHIP_SCHEMA,
    MOOC_SCHEMA,
)

__all__ = [
    'CertificateTypeSchema',
    'FieldSpec',
    'FDP_SCHEMA',
    'RESOURCE_PERSON_SCHEMA',
    'MEMBERSHIP_SCHEMA',
    'MOOC_SCHEMA',
    'BUILTIN_SCHEMAS',
]
