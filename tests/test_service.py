import logging

import pydantic
import pytest

from agrobase import config
from agrobase.agent.prompts import DIAGNOSE_QUERY
from agrobase.diagnosis import Confidence, DiagnosisService, ImagePayload
from agrobase.errors import ContractViolation, ModelError, ValidationError

from conftest import HIGH, LOW, UNRECOGNIZED, FakeGateway


def test_diagnose_returns_validated_record(png_uri):
    gw = FakeGateway(HIGH)
    rec = DiagnosisService(gateway=gw).diagnose(png_uri)

    assert rec.is_recognized is True
    assert rec.disease_name == "Leaf Blight"
    assert rec.confidence is Confidence.HIGH
    assert rec.veterinary_info is None

    assert len(gw.calls) == 1
    app_name, query, image = gw.calls[0]
    assert app_name == config.DIAGNOSE_APP
    assert query == DIAGNOSE_QUERY
    assert isinstance(image, ImagePayload) and image.mime_type == "image/png"


def test_unrecognized_is_a_valid_outcome(png_uri):
    rec = DiagnosisService(gateway=FakeGateway(UNRECOGNIZED)).diagnose(png_uri)
    assert rec.is_recognized is False
    assert rec.veterinary_info is not None


def test_low_confidence_carries_contact(png_uri):
    rec = DiagnosisService(gateway=FakeGateway(LOW)).diagnose(png_uri)
    assert rec.medicines == ["Consult a professional"]
    assert rec.veterinary_info.name == "Green Valley Agro Clinic"


def test_malformed_payload_never_reaches_the_model():
    gw = FakeGateway(HIGH)
    with pytest.raises(ValidationError):
        DiagnosisService(gateway=gw).diagnose("not-a-data-uri")
    assert gw.calls == []


def test_model_failure_propagates(png_uri, caplog):
    gw = FakeGateway(error=ModelError("Model call timed out after 30s"))
    with caplog.at_level(logging.WARNING, logger="agrobase.diagnosis.service"):
        with pytest.raises(ModelError):
            DiagnosisService(gateway=gw).diagnose(png_uri)
    assert "model error" in caplog.text


@pytest.mark.parametrize("reply", [
    "Looks like leaf blight to me.",
    {"isRecognized": True, "diseaseName": "Leaf Blight"},
    {**HIGH, "confidence": "Very High"},
])
def test_unparseable_output_is_a_model_error(png_uri, reply):
    with pytest.raises(ModelError):
        DiagnosisService(gateway=FakeGateway(reply)).diagnose(png_uri)


def test_mixed_branch_output_is_rejected_not_repaired(png_uri, caplog):
    mixed = {**UNRECOGNIZED, "effects": ["Spots", "Wilting"]}
    with caplog.at_level(logging.WARNING, logger="agrobase.diagnosis.service"):
        with pytest.raises(ContractViolation) as exc:
            DiagnosisService(gateway=FakeGateway(mixed)).diagnose(png_uri)
    assert "effects" in exc.value.violations[0]
    assert "contract violation" in caplog.text


def test_records_are_immutable(png_uri):
    rec = DiagnosisService(gateway=FakeGateway(HIGH)).diagnose(png_uri)
    with pytest.raises(pydantic.ValidationError):
        rec.disease_name = "Rust"


def test_record_round_trips_through_wire_format(png_uri):
    rec = DiagnosisService(gateway=FakeGateway(LOW)).diagnose(png_uri)
    wire = rec.to_wire()
    assert wire["isRecognized"] is True
    assert wire["veterinaryInfo"]["phone"] == "+91 98765 43210"
    assert "veterinaryInfo" not in DiagnosisService(gateway=FakeGateway(HIGH)).diagnose(png_uri).to_wire()
