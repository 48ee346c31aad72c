import logging
from typing import Any, Literal, Mapping, Optional, Type, TypeVar, get_args

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationError
from .predictors import Predictor, crop_predictor, fertilizer_predictor

logger = logging.getLogger(__name__)

SoilType = Literal["Sandy", "Loamy", "Black", "Red", "Clayey"]
CropType = Literal[
    "Maize", "Sugarcane", "Cotton", "Tobacco", "Paddy", "Barley", "Wheat",
    "Millets", "Oil seeds", "Pulses", "Ground Nuts",
]

SOIL_TYPES = get_args(SoilType)
CROP_TYPES = get_args(CropType)

_M = TypeVar("_M", bound=BaseModel)


class _Form(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class CropConditions(_Form):
    """Soil and weather readings for the crop recommendation form."""
    nitrogen: float = Field(90, ge=0)
    phosphorus: float = Field(42, ge=0)
    potassium: float = Field(43, ge=0)
    ph: float = Field(6.5, ge=0, le=14)
    rainfall: float = Field(202.9, ge=0)
    temperature: float = 20.8
    humidity: float = Field(82.0, ge=0, le=100)


class FertilizerConditions(_Form):
    soil_type: SoilType = Field("Loamy", alias="soilType")
    crop_type: CropType = Field("Maize", alias="cropType")
    nitrogen: float = Field(45, ge=0)
    phosphorus: float = Field(55, ge=0)
    potassium: float = Field(0, ge=0)


_MESSAGES = {
    "nitrogen": "Nitrogen can't be negative.",
    "phosphorus": "Phosphorus can't be negative.",
    "potassium": "Potassium can't be negative.",
    "ph": "pH must be between 0 and 14.",
    "rainfall": "Rainfall can't be negative.",
    "humidity": "Humidity must be between 0 and 100.",
    "soil_type": "Please select a soil type.",
    "soilType": "Please select a soil type.",
    "crop_type": "Please select a crop type.",
    "cropType": "Please select a crop type.",
}


def parse_form(model: Type[_M], data: Optional[Mapping[str, Any]]) -> _M:
    """Validate raw form fields; blank fields fall back to the form defaults."""
    cleaned = {k: v for k, v in (data or {}).items() if not (isinstance(v, str) and not v.strip())}
    try:
        return model.model_validate(cleaned)
    except pydantic.ValidationError as e:
        msgs = []
        for err in e.errors():
            field = str(err["loc"][0]) if err.get("loc") else ""
            msgs.append(_MESSAGES.get(field) or f"{field}: {err['msg']}")
        raise ValidationError(" ".join(dict.fromkeys(msgs))) from e


def recommend_crop(conditions: CropConditions, predictor: Optional[Predictor] = None) -> str:
    crop = (predictor or crop_predictor()).predict(conditions.model_dump())
    logger.info("crop recommendation: %s", crop)
    return crop


def recommend_fertilizer(conditions: FertilizerConditions, predictor: Optional[Predictor] = None) -> str:
    fertilizer = (predictor or fertilizer_predictor()).predict(conditions.model_dump())
    logger.info("fertilizer recommendation for %s/%s: %s", conditions.crop_type, conditions.soil_type, fertilizer)
    return fertilizer
