import base64
import io
import json

import pytest
from PIL import Image

from agrobase.diagnosis import DiagnosisRecord

VET = {"name": "Green Valley Agro Clinic", "phone": "+91 98765 43210", "address": "12 Market Road, Nashik"}

HIGH = {
    "isRecognized": True,
    "diseaseName": "Leaf Blight",
    "effects": ["Brown lesions on leaves", "Premature leaf drop"],
    "medicines": ["Mancozeb spray", "Copper oxychloride"],
    "confidence": "High",
}

LOW = {
    "isRecognized": True,
    "diseaseName": "Early Blight",
    "effects": ["Concentric rings on leaves", "Yellowing margins"],
    "medicines": ["Consult a professional"],
    "confidence": "Low",
    "veterinaryInfo": VET,
}

UNRECOGNIZED = {
    "isRecognized": False,
    "diseaseName": "Unknown",
    "effects": [],
    "medicines": [],
    "confidence": "Unknown",
    "veterinaryInfo": VET,
}


class FakeGateway:
    """Stands in for AgentGateway; records calls and replays one reply."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def run_agent_once(self, app_name, query, image=None):
        self.calls.append((app_name, query, image))
        if self.error is not None:
            raise self.error
        return self.reply if isinstance(self.reply, str) else json.dumps(self.reply)


def record(data: dict, **changes) -> DiagnosisRecord:
    return DiagnosisRecord.model_validate({**data, **changes})


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (32, 24), (34, 139, 34)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_uri(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
