from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN_DISEASE = "Unknown"
CONSULT_PROFESSIONAL = "Consult a professional"


class Confidence(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"


class _Wire(BaseModel):
    # camelCase on the wire, snake_case in Python; records are immutable once built
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class VeterinaryInfo(_Wire):
    name: str = Field(description="Name of a nearby veterinary clinic or expert.")
    phone: str = Field(description="Contact phone number.")
    address: str = Field(description="Physical address of the clinic/expert.")


class DiagnosisRecord(_Wire):
    """
    Result of one diagnosis attempt. This model only checks the shape; the
    branch rules live in `contract.check_contract`.
    """
    is_recognized: bool = Field(description="Whether the AI could identify a potential disease.")
    disease_name: str = Field(
        description="The common name of the identified disease. If not recognized, this should be 'Unknown'."
    )
    effects: List[str] = Field(description="Two key effects or symptoms of the disease.")
    medicines: List[str] = Field(description="A list of suggested medicines or treatments.")
    confidence: Confidence = Field(description="The AI's confidence in its diagnosis.")
    veterinary_info: Optional[VeterinaryInfo] = Field(
        default=None,
        description=(
            "Contact details for a nearby veterinary expert, provided if the disease is "
            "not recognized or confidence is low."
        ),
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
