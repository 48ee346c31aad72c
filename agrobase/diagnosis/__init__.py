from .contract import check_contract, parse_record, violations
from .payload import ImagePayload
from .schema import CONSULT_PROFESSIONAL, UNKNOWN_DISEASE, Confidence, DiagnosisRecord, VeterinaryInfo
from .service import DiagnosisService, diagnose

__all__ = [
    "CONSULT_PROFESSIONAL",
    "UNKNOWN_DISEASE",
    "Confidence",
    "DiagnosisRecord",
    "DiagnosisService",
    "ImagePayload",
    "VeterinaryInfo",
    "check_contract",
    "diagnose",
    "parse_record",
    "violations",
]
