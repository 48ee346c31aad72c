import json
from typing import Any, List, Union

import pydantic

from ..errors import ContractViolation, ModelError
from .schema import CONSULT_PROFESSIONAL, UNKNOWN_DISEASE, Confidence, DiagnosisRecord

_CONFIDENT = (Confidence.HIGH, Confidence.MEDIUM)


def parse_record(raw: Union[str, bytes, dict, Any]) -> DiagnosisRecord:
    """
    Turn untrusted model output into a DiagnosisRecord (shape only).
    Anything that is not a JSON object with the record fields is a ModelError.
    """
    data = raw
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else raw
        text = strip_code_fence(text)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ModelError(f"Model output is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ModelError(f"Model output is not a JSON object (got {type(data).__name__}).")
    try:
        return DiagnosisRecord.model_validate(data)
    except pydantic.ValidationError as e:
        raise ModelError(f"Model output does not match the diagnosis shape: {e.error_count()} error(s)") from e


def strip_code_fence(text: str) -> str:
    t = (text or "").strip()
    if t.startswith("```"):
        t = t.split("\n", 1)[1] if "\n" in t else ""
        if t.rstrip().endswith("```"):
            t = t.rstrip()[:-3]
    return t.strip()


def violations(record: DiagnosisRecord) -> List[str]:
    """Every branch rule the record breaks; empty when it is consistent."""
    out: List[str] = []
    vet = record.veterinary_info
    n_eff, n_med = len(record.effects), len(record.medicines)

    if not record.is_recognized:
        if record.disease_name != UNKNOWN_DISEASE:
            out.append(f"unrecognized result must name disease '{UNKNOWN_DISEASE}', got '{record.disease_name}'")
        if n_eff:
            out.append(f"unrecognized result must have no effects, got {n_eff}")
        if n_med:
            out.append(f"unrecognized result must have no medicines, got {n_med}")
        if record.confidence is not Confidence.UNKNOWN:
            out.append(f"unrecognized result must have confidence Unknown, got {record.confidence.value}")
        if vet is None:
            out.append("unrecognized result must carry veterinary contact info")
    else:
        if record.confidence is Confidence.UNKNOWN:
            out.append("recognized result cannot have confidence Unknown")
        if not record.disease_name.strip() or record.disease_name == UNKNOWN_DISEASE:
            out.append("recognized result must name a disease")
        if n_eff != 2:
            out.append(f"recognized result must list exactly 2 effects, got {n_eff}")

        if record.confidence in _CONFIDENT:
            if not 1 <= n_med <= 3:
                out.append(f"{record.confidence.value} confidence result must list 1-3 medicines, got {n_med}")
            if vet is not None:
                out.append(f"{record.confidence.value} confidence result must not carry veterinary contact info")
        elif record.confidence is Confidence.LOW:
            if list(record.medicines) != [CONSULT_PROFESSIONAL]:
                out.append(f"Low confidence result must list only '{CONSULT_PROFESSIONAL}' as medicine")
            if vet is None:
                out.append("Low confidence result must carry veterinary contact info")

    if vet is not None:
        for field in ("name", "phone", "address"):
            if not getattr(vet, field).strip():
                out.append(f"veterinary contact {field} is blank")
    return out


def check_contract(record: DiagnosisRecord) -> DiagnosisRecord:
    found = violations(record)
    if found:
        raise ContractViolation(found)
    return record
