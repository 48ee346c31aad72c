"""
Text AI flows (disease summaries, feature instructions) and the two-stage
disease detector built on them.
"""
import json
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel, Field

from . import config
from .agent_gateway import AgentGateway, default_gateway
from .diagnosis.contract import strip_code_fence
from .diagnosis.payload import ImagePayload
from .errors import AgrobaseError, ModelError, ValidationError
from .predictors import Predictor, animal_disease_predictor, crop_disease_predictor

logger = logging.getLogger(__name__)

SUMMARY_FAILED = "Could not retrieve disease information. Please try again."

_T = TypeVar("_T", bound=BaseModel)


class DiseaseSummary(BaseModel):
    summary: str = Field(description="A summary of the disease, its causes, and potential treatments.")


class FeatureInstructions(BaseModel):
    instructions: str = Field(description="AI-generated instructions for the crop recommendation feature.")


def _run(app_name: str, query: str, schema: Type[_T], gateway: Optional[AgentGateway]) -> _T:
    raw = (gateway or default_gateway()).run_agent_once(app_name, query)
    try:
        return schema.model_validate(json.loads(strip_code_fence(raw)))
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        raise ModelError(f"Agent {app_name} returned unparseable output: {e}") from e


def _require(value: Optional[str], what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} is required.")
    return value.strip()


def summarize_crop_disease_info(disease_name: str, gateway: Optional[AgentGateway] = None) -> str:
    name = _require(disease_name, "Disease name")
    return _run(config.CROP_SUMMARY_APP, f"Disease name: {name}", DiseaseSummary, gateway).summary


def summarize_animal_disease_info(disease_name: str, gateway: Optional[AgentGateway] = None) -> str:
    name = _require(disease_name, "Disease name")
    return _run(config.ANIMAL_SUMMARY_APP, f"Disease Name: {name}", DiseaseSummary, gateway).summary


def generate_crop_recommendation_instructions(
    feature_description: str,
    input_parameters: Sequence[str],
    output_interpretation: str,
    gateway: Optional[AgentGateway] = None,
) -> str:
    desc = _require(feature_description, "Feature description")
    interp = _require(output_interpretation, "Output interpretation")
    params = [p.strip() for p in (input_parameters or []) if isinstance(p, str) and p.strip()]
    if not params:
        raise ValidationError("At least one input parameter is required.")
    query = (
        f"Feature Description: {desc}\n"
        f"Input Parameters: {', '.join(params)}\n"
        f"Output Interpretation: {interp}"
    )
    return _run(config.CROP_INSTRUCTIONS_APP, query, FeatureInstructions, gateway).instructions


@dataclass(frozen=True)
class DetectionResult:
    disease: str
    summary: Optional[str] = None
    error: Optional[str] = None


class DiseaseDetector:
    """First-stage guess from a predictor, then a summary from the text flow."""

    def __init__(self, predictor: Predictor, summarize: Callable[[str], str]):
        self.predictor = predictor
        self.summarize = summarize

    def detect(self, image: Union[str, ImagePayload]) -> DetectionResult:
        payload = image if isinstance(image, ImagePayload) else ImagePayload.parse(image)
        disease = self.predictor.predict(payload)
        try:
            summary = self.summarize(disease)
        except AgrobaseError as e:
            # the detection stands on its own; only the summary is missing
            logger.warning("summary for %r failed: %s", disease, e)
            return DetectionResult(disease=disease, error=SUMMARY_FAILED)
        return DetectionResult(disease=disease, summary=summary)


def crop_disease_detector(gateway: Optional[AgentGateway] = None) -> DiseaseDetector:
    return DiseaseDetector(crop_disease_predictor(), lambda name: summarize_crop_disease_info(name, gateway))


def animal_disease_detector(gateway: Optional[AgentGateway] = None) -> DiseaseDetector:
    return DiseaseDetector(animal_disease_predictor(), lambda name: summarize_animal_disease_info(name, gateway))
