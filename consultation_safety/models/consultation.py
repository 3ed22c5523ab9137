"""
Consultation Record Data Models

Input side of the engine: the in-progress consultation note as the form
submits it. The engine reads these models and never mutates them.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any, Union


class MedicationEntry(BaseModel):
    """One prescribed medication line"""

    name: Optional[str] = Field(None, description="Medication name as typed by the clinician")
    dose: Optional[str] = Field(None, description="Dose (e.g. 500 mg)")
    route: Optional[str] = Field(None, description="Administration route")
    frequency: Optional[str] = Field(None, description="Frequency (e.g. cada 8 horas)")
    duration: Optional[str] = Field(None, description="Duration (e.g. 7 días)")

    class Config:
        frozen = True
        extra = "ignore"
        coerce_numbers_to_str = True

    @property
    def normalized_name(self) -> str:
        """Lowercased name, empty when absent."""
        return (self.name or "").lower()


class ConsultationRecord(BaseModel):
    """In-progress consultation note submitted for validation"""

    current_condition: Optional[str] = Field(None, description="Padecimiento actual")
    diagnosis: Optional[str] = Field(None, description="Diagnosis narrative")
    treatment: Optional[str] = Field(None, description="Treatment plan narrative")

    vital_signs: Optional[Dict[str, Union[str, int, float, None]]] = Field(
        None,
        description="Vital signs keyed by name (blood_pressure, heart_rate, temperature, ...)"
    )
    physical_examination: Optional[Any] = Field(
        None,
        description="Physical examination, free text or structured"
    )
    prognosis: Optional[str] = Field(None, description="Prognosis narrative")

    medications: List[MedicationEntry] = Field(
        default_factory=list,
        description="Prescribed medications, in entry order"
    )

    patient_age: Optional[int] = Field(None, ge=0, description="Patient age in years")
    patient_allergies: List[str] = Field(
        default_factory=list,
        description="Known patient allergies"
    )
    patient_conditions: List[str] = Field(
        default_factory=list,
        description="Known chronic patient conditions"
    )

    @field_validator("medications", "patient_allergies", "patient_conditions", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        # The form sends null for lists the clinician never touched
        return [] if value is None else value

    class Config:
        frozen = True
        extra = "ignore"
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "current_condition": "Dolor abdominal de 3 días, cólico, irradiado a fosa iliaca derecha",
                "diagnosis": "Apendicitis aguda",
                "treatment": "Apendicectomía de urgencia, seguimiento en 7 días",
                "vital_signs": {
                    "blood_pressure": "120/80",
                    "heart_rate": 88,
                    "temperature": 37.9
                },
                "physical_examination": "Signo de McBurney positivo",
                "prognosis": "Bueno",
                "medications": [],
                "patient_age": 34,
                "patient_allergies": ["penicilina"],
                "patient_conditions": []
            }
        }
