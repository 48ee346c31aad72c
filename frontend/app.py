# app.py - Flask UI ↔ Agrobase core (Cloud Run–ready)
import io
import logging
from typing import Optional

import pydantic
from dotenv import load_dotenv
from flask import Flask, jsonify, request, send_file
from werkzeug.exceptions import HTTPException

# Local dev only; Cloud Run uses env vars set at deploy
load_dotenv()

from agrobase import config
from agrobase.diagnosis import DiagnosisRecord, DiagnosisService, ImagePayload, check_contract
from agrobase.errors import ContractViolation, ModelError, ValidationError
from agrobase.flows import (
    animal_disease_detector,
    crop_disease_detector,
    generate_crop_recommendation_instructions,
)
from agrobase.recommendation import (
    CROP_TYPES,
    SOIL_TYPES,
    CropConditions,
    FertilizerConditions,
    parse_form,
    recommend_crop,
    recommend_fertilizer,
)
from agrobase.report import ReportGenerator

logger = logging.getLogger("agrobase.frontend")

FEATURES = [
    {"title": "Crop Recommendation", "link": "/recommend/crop",
     "description": "Get personalized crop suggestions based on your soil and weather conditions."},
    {"title": "Fertilizer Guide", "link": "/recommend/fertilizer",
     "description": "Receive fertilizer recommendations tailored to your crop and soil.",
     "soil_types": list(SOIL_TYPES), "crop_types": list(CROP_TYPES)},
    {"title": "Disease Diagnosis", "link": "/diagnose",
     "description": "Upload an image of a crop or animal to diagnose diseases and download a report."},
    {"title": "Crop Disease Detection", "link": "/detect/crop",
     "description": "Upload a leaf image to detect potential diseases and get a summary."},
    {"title": "Animal Disease Prediction", "link": "/detect/animal",
     "description": "Upload a livestock image to check for common diseases and get a summary."},
]

# ---- Core services (swappable in tests) -------------------------------------
diagnosis_service = DiagnosisService()
report_generator = ReportGenerator()
crop_detector = crop_disease_detector()
animal_detector = animal_disease_detector()

# ---- Flask ------------------------------------------------------------------
app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_MB * 1024 * 1024


@app.errorhandler(Exception)
def _json_errors(e):
    if isinstance(e, HTTPException):
        return jsonify(ok=False, error=e.description or str(e)), e.code
    if isinstance(e, ValidationError):
        return jsonify(ok=False, error=str(e)), 400
    if isinstance(e, (ModelError, ContractViolation)):
        # details are logged by the service; the user gets a generic failure
        return jsonify(ok=False, error="The AI service could not complete the request. Please try again."), 502
    logger.exception("unhandled error on %s", request.path)
    return jsonify(ok=False, error="Internal server error"), 500


# ---- Request helpers --------------------------------------------------------
def _fields() -> dict:
    if request.is_json:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}
    return request.form.to_dict()


def _image_from_request() -> ImagePayload:
    """Uploaded file field 'image', or a `photoDataUri` data URI."""
    f = request.files.get("image")
    if f:
        mime = f.mimetype if f.mimetype != "application/octet-stream" else None
        return ImagePayload.from_bytes(f.read(), mime, filename=f.filename)
    uri: Optional[str] = _fields().get("photoDataUri")
    if not uri:
        raise ValidationError("Please upload an image first.")
    return ImagePayload.parse(uri)


# ---- Routes -----------------------------------------------------------------
@app.route("/", methods=["GET"])
def index():
    return jsonify(ok=True, message="Agrobase backend is running", features=FEATURES)


@app.route("/health", methods=["GET"])
def health():
    return jsonify(ok=True)


@app.route("/diagnose", methods=["POST"])
def diagnose():
    record = diagnosis_service.diagnose(_image_from_request())
    return jsonify(ok=True, record=record.to_wire())


@app.route("/diagnose/report", methods=["POST"])
def diagnose_report():
    body = _fields()
    try:
        record = DiagnosisRecord.model_validate(body.get("record") or {})
        check_contract(record)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid diagnosis record: {e.error_count()} error(s)") from e
    except ContractViolation as e:
        raise ValidationError(f"Inconsistent diagnosis record: {e}") from e

    image = None
    if body.get("photoDataUri"):
        image = ImagePayload.parse(body["photoDataUri"]).data
    report = report_generator.render(record, image)
    return send_file(
        io.BytesIO(report.content),
        mimetype=report.mimetype,
        as_attachment=True,
        download_name=report.filename,
    )


def _detect(detector):
    result = detector.detect(_image_from_request())
    return jsonify(ok=True, disease=result.disease, summary=result.summary, error=result.error)


@app.route("/detect/crop", methods=["POST"])
def detect_crop():
    return _detect(crop_detector)


@app.route("/detect/animal", methods=["POST"])
def detect_animal():
    return _detect(animal_detector)


@app.route("/recommend/crop", methods=["POST"])
def crop_recommendation():
    conditions = parse_form(CropConditions, _fields())
    return jsonify(ok=True, crop=recommend_crop(conditions))


@app.route("/recommend/fertilizer", methods=["POST"])
def fertilizer_recommendation():
    conditions = parse_form(FertilizerConditions, _fields())
    return jsonify(ok=True, fertilizer=recommend_fertilizer(conditions))


@app.route("/recommend/crop/instructions", methods=["POST"])
def crop_instructions():
    body = _fields()
    params = body.get("inputParameters") or []
    if isinstance(params, str):
        params = params.split(",")
    instructions = generate_crop_recommendation_instructions(
        body.get("featureDescription"), params, body.get("outputInterpretation")
    )
    return jsonify(ok=True, instructions=instructions)


if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Cloud Run injects PORT; default to 8080 for local parity
    logger.info("UI http://0.0.0.0:%d  ADK=%s", config.PORT, config.ADK_SERVER_URL)
    app.run(host="0.0.0.0", port=config.PORT, debug=False)
