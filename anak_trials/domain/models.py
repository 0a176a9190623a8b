"""Domain models for clinical trial checkpoints and anonymized exports.

Security Impact:
    - CheckpointUpdate rejects unknown fields so request bodies cannot reach
      columns outside the "24" checkpoint
    - AnonymizedTrialRecord refuses to carry the raw nisn next to its token
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Order matters: it is the column order of the UPDATE statement.
CHECKPOINT_FIELDS: tuple[str, ...] = (
    "heart_rate_24",
    "blood_pressure_24",
    "respirate_24",
    "temperature_24",
    "pain_score_24",
    "pain_location_24",
    "pain_quality_24",
    "pain_quantity_24",
    "pain_frequency_24",
    "pain_situation_24",
    "pain_factors_24",
    "other_symptoms_24",
)


class CheckpointUpdate(BaseModel):
    """Body of the checkpoint update request.

    Every field must be present; ``None`` (or an empty form value) clears the
    column. Numeric vitals are coerced from form strings by Pydantic.

    Parameters:
        heart_rate_24: Heart rate in beats per minute
        blood_pressure_24: Blood pressure as written on the chart (e.g. "110/70")
        respirate_24: Respiration rate per minute
        temperature_24: Body temperature in degrees Celsius
        pain_score_24: Pain score on a 0-10 scale
        pain_location_24: Where the pain is felt
        pain_quality_24: Pain quality description
        pain_quantity_24: Pain quantity/intensity description
        pain_frequency_24: How often the pain occurs
        pain_situation_24: Situation in which the pain occurs
        pain_factors_24: Aggravating or relieving factors
        other_symptoms_24: Free-text other symptoms
    """

    model_config = ConfigDict(extra="forbid")

    heart_rate_24: Optional[int] = Field(..., ge=0, le=400, description="Heart rate (bpm)")
    blood_pressure_24: Optional[str] = Field(..., max_length=32, description="Blood pressure")
    respirate_24: Optional[int] = Field(..., ge=0, le=200, description="Respiration rate (/min)")
    temperature_24: Optional[float] = Field(..., ge=20, le=50, description="Temperature (C)")
    pain_score_24: Optional[int] = Field(..., ge=0, le=10, description="Pain score (0-10)")
    pain_location_24: Optional[str] = Field(..., max_length=255)
    pain_quality_24: Optional[str] = Field(..., max_length=255)
    pain_quantity_24: Optional[str] = Field(..., max_length=255)
    pain_frequency_24: Optional[str] = Field(..., max_length=255)
    pain_situation_24: Optional[str] = Field(..., max_length=255)
    pain_factors_24: Optional[str] = Field(..., max_length=255)
    other_symptoms_24: Optional[str] = Field(..., max_length=2000)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """HTML forms submit untouched inputs as empty strings."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def as_fields(self) -> dict[str, Any]:
        """Return the checkpoint values keyed by column name."""
        return {name: getattr(self, name) for name in CHECKPOINT_FIELDS}


class AnonymizedTrialRecord(BaseModel):
    """Export view of a clinical trial row.

    The remaining trial columns are carried as extra fields, unchanged.
    """

    model_config = ConfigDict(extra="allow")

    hashed_nisn: str = Field(..., min_length=1, description="One-way token derived from nisn")

    @model_validator(mode="before")
    @classmethod
    def reject_raw_identifier(cls, data: Any) -> Any:
        if isinstance(data, dict) and "nisn" in data:
            raise ValueError("anonymized record must not contain nisn")
        return data
