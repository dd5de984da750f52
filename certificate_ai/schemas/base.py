"""
Base schema for all certificate types
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Tuple, Literal


FieldKind = Literal["text", "date", "number"]


class FieldSpec(BaseModel):
    """One structured value a certificate type extracts"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Field key used in prompts and results")
    label: str = Field(..., description="Human-readable label shown in the form")
    type: FieldKind = Field(default="text", description="Value kind")
    options: Optional[Tuple[str, ...]] = Field(None, description="Allowed values, if constrained")
    required: bool = Field(default=False, description="Must be present before the record can be saved")


class CertificateTypeSchema(BaseModel):
    """Static registry entry describing one recognized document category"""

    model_config = ConfigDict(frozen=True)

    type_key: str = Field(..., description="Unique identifier, e.g. 'FDP'")
    display_name: str = Field(..., description="Name used in prompts and UI")
    description: str = Field(..., description="What documents belong to this type")
    storage_table: str = Field(..., description="Destination relational table")
    section_code: str = Field(..., description="Reporting classification code")
    classifier_hint: str = Field(..., description="Category guidance given to the classifier")
    keywords: Tuple[str, ...] = Field(default=(), description="Distinguishing phrases for the classifier")
    fields: Tuple[FieldSpec, ...] = Field(..., description="Ordered fields to extract")

    @field_validator('type_key')
    @classmethod
    def validate_type_key(cls, v):
        if not v or v.upper() != v or v == "UNKNOWN":
            raise ValueError(f"Invalid type key: {v!r}")
        return v

    @field_validator('fields')
    @classmethod
    def validate_unique_fields(cls, v):
        names = [f.name for f in v]
        if len(names) != len(set(names)):
            raise ValueError("Field names must be unique within a certificate type")
        if not names:
            raise ValueError("A certificate type needs at least one field")
        return v

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    def get_field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None
