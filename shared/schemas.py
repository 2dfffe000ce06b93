"""Pydantic schemas for validation and serialization."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from shared.enums import ImageSlot, YesNo
from shared.validation import sanitize_html

# Wire names of every metadata field, in form order
METADATA_FIELDS = [
    'name', 'age', 'gender', 'city', 'country',
    'hairType', 'hairLength', 'hairDensity', 'hairCondition', 'scalpType',
    'recentTreatments', 'treatmentDetails', 'scalpConditions', 'conditionDetails',
]

# Detail field -> the yes/no flag that makes it required
CONDITIONAL_DETAIL_FIELDS = {
    'treatmentDetails': 'recentTreatments',
    'conditionDetails': 'scalpConditions',
}

REQUIRED_METADATA_FIELDS = [f for f in METADATA_FIELDS if f not in CONDITIONAL_DETAIL_FIELDS]

TEXT_FIELDS = (
    'name', 'gender', 'city', 'country',
    'hair_type', 'hair_length', 'hair_density', 'hair_condition', 'scalp_type',
)


def required_fields_for(metadata):
    """Return the required wire field names given the current flag answers.

    A conditional detail field is required only while its flag is 'yes'.
    """
    required = list(REQUIRED_METADATA_FIELDS)
    for detail_field, flag_field in CONDITIONAL_DETAIL_FIELDS.items():
        flag = metadata.get(flag_field)
        if isinstance(flag, str) and flag.strip().lower() == YesNo.YES.value:
            required.append(detail_field)
    return required


# Participant Schemas
class ParticipantCreate(BaseModel):
    """Metadata submitted with a new participant.

    Accepts camelCase wire names (``hairType``) and snake_case attribute names.
    Every violation is reported together by pydantic, including the
    conditional detail requirements.
    """
    name: str = Field(..., min_length=1, max_length=200)
    age: int = Field(..., ge=0, le=150)
    gender: str = Field(..., min_length=1, max_length=50)
    city: str = Field(..., min_length=1, max_length=200)
    country: str = Field(..., min_length=1, max_length=200)
    hair_type: str = Field(..., min_length=1, max_length=100)
    hair_length: str = Field(..., min_length=1, max_length=100)
    hair_density: str = Field(..., min_length=1, max_length=100)
    hair_condition: str = Field(..., min_length=1, max_length=100)
    scalp_type: str = Field(..., min_length=1, max_length=100)
    recent_treatments: YesNo
    treatment_details: Optional[str] = Field(default=None, max_length=2000, validate_default=True)
    scalp_conditions: YesNo
    condition_details: Optional[str] = Field(default=None, max_length=2000, validate_default=True)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def sanitize_text_fields(cls, v):
        v = sanitize_html(v)
        if not v.strip():
            raise ValueError('must not be empty')
        return v

    @field_validator('recent_treatments', 'scalp_conditions', mode='before')
    @classmethod
    def normalize_flag(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('treatment_details', 'condition_details')
    @classmethod
    def validate_details(cls, v, info: ValidationInfo):
        flag_name = 'recent_treatments' if info.field_name == 'treatment_details' else 'scalp_conditions'
        if v:
            v = sanitize_html(v).strip()
        if info.data.get(flag_name) == YesNo.YES.value and not v:
            raise ValueError(f"required when {to_camel(flag_name)} is 'yes'")
        return v or None


class ParticipantResponse(BaseModel):
    id: str
    name: str
    age: int
    gender: str
    city: str
    country: str
    hair_type: str
    hair_length: str
    hair_density: str
    hair_condition: str
    scalp_type: str
    recent_treatments: str
    treatment_details: Optional[str] = None
    scalp_conditions: str
    condition_details: Optional[str] = None
    submitted_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Participant Image Schemas
class ParticipantImageCreate(BaseModel):
    participant_id: str = Field(..., min_length=1)
    image_type: ImageSlot
    filename: str = Field(..., min_length=1, max_length=500)
    original_name: str = Field(..., min_length=1, max_length=500)
    mime_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., ge=0)
    hash_value: str = Field(default="", max_length=64)

    model_config = ConfigDict(use_enum_values=True)

    @field_validator('mime_type')
    @classmethod
    def validate_mime_type(cls, v):
        if not v.lower().startswith('image/'):
            raise ValueError('must be an image content type')
        return v


class ParticipantImageResponse(BaseModel):
    id: str
    participant_id: str
    image_type: str
    filename: str
    original_name: str
    mime_type: str
    file_size: int
    uploaded_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# API envelopes
class SubmitResponse(BaseModel):
    success: bool
    message: str = ""
    participant_id: Optional[str] = None
    images_count: int = 0
    failed_images: List[str] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[FieldError]] = None


class ParticipantListResponse(BaseModel):
    success: bool = True
    count: int
    participants: List[ParticipantResponse]


class ParticipantDetailResponse(BaseModel):
    success: bool = True
    participant: ParticipantResponse
    images: List[ParticipantImageResponse]


class ImageIntegrityReport(BaseModel):
    image_id: str
    participant_id: str
    image_type: str
    filename: str
    exists: bool
    size_matches: bool = False
    hash_matches: bool = False
    error: Optional[str] = None
