"""
Prediction capabilities behind the recommendation forms and the disease
detector. The shipped predictors are stubs that pick a random label; a trained
model only needs to implement `Predictor.predict`.
"""
import logging
import random
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

RECOMMENDED_CROPS: Tuple[str, ...] = (
    "Maize", "Rice", "Jute", "Cotton", "Coconut", "Papaya", "Orange", "Apple",
    "Muskmelon", "Watermelon", "Grapes", "Mango", "Banana", "Pomegranate",
    "Lentil", "Black gram", "Mung bean", "Moth beans", "Pigeon peas",
    "Kidney beans", "Chickpea",
)

FERTILIZER_NAMES: Tuple[str, ...] = ("Urea", "DAP", "14-35-14", "28-28", "17-17-17", "20-20", "10-26-26")

CROP_DISEASES: Tuple[str, ...] = (
    "Apple Scab",
    "Apple Black Rot",
    "Cedar Apple Rust",
    "Cherry Powdery Mildew",
    "Corn Common Rust",
    "Corn Gray Leaf Spot",
    "Grape Black Rot",
    "Grape Esca (Black Measles)",
    "Grape Leaf Blight",
    "Peach Bacterial Spot",
    "Pepper Bell Bacterial Spot",
    "Potato Early Blight",
    "Potato Late Blight",
    "Tomato Bacterial Spot",
    "Tomato Early Blight",
    "Tomato Late Blight",
    "Tomato Leaf Mold",
)

ANIMAL_DISEASES: Tuple[str, ...] = (
    "Lumpy Skin Disease",
    "Blackleg",
    "Anthrax",
    "Foot and Mouth Disease",
    "Mastitis",
    "Infectious Bovine Rhinotracheitis",
    "Bovine Viral Diarrhea",
)


class Predictor(Protocol):
    def predict(self, features: Any) -> str: ...


class RandomChoicePredictor:
    """
    Stub predictor: ignores the features and returns a random label.
    Replace with a trained model later.
    """

    def __init__(self, labels: Sequence[str], rng: Optional[random.Random] = None, name: str = "random"):
        if not labels:
            raise ValueError("RandomChoicePredictor needs at least one label")
        self.labels = tuple(labels)
        self.name = name
        self._rng = rng or random.Random()

    def predict(self, features: Any = None) -> str:
        label = self._rng.choice(self.labels)
        logger.debug("%s predictor -> %s (features=%s)", self.name, label, _describe(features))
        return label


def _describe(features: Any) -> str:
    if isinstance(features, Mapping):
        return ",".join(sorted(map(str, features)))
    return type(features).__name__


def crop_predictor(rng: Optional[random.Random] = None) -> RandomChoicePredictor:
    return RandomChoicePredictor(RECOMMENDED_CROPS, rng, name="crop")


def fertilizer_predictor(rng: Optional[random.Random] = None) -> RandomChoicePredictor:
    return RandomChoicePredictor(FERTILIZER_NAMES, rng, name="fertilizer")


def crop_disease_predictor(rng: Optional[random.Random] = None) -> RandomChoicePredictor:
    return RandomChoicePredictor(CROP_DISEASES, rng, name="crop_disease")


def animal_disease_predictor(rng: Optional[random.Random] = None) -> RandomChoicePredictor:
    return RandomChoicePredictor(ANIMAL_DISEASES, rng, name="animal_disease")
