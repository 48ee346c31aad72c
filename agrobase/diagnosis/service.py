import logging
from typing import Optional, Union

from .. import config
from ..agent.prompts import DIAGNOSE_QUERY
from ..agent_gateway import AgentGateway, default_gateway
from ..errors import ContractViolation, ModelError
from .contract import check_contract, parse_record
from .payload import ImagePayload
from .schema import DiagnosisRecord

logger = logging.getLogger(__name__)


class DiagnosisService:
    """
    Image in, branch-consistent DiagnosisRecord out.

    The model is treated as an unreliable producer: its output is parsed and
    checked against the branch rules, never repaired. Callers should not
    submit a second image while a call is outstanding; the service itself
    does not serialise requests.
    """

    def __init__(self, gateway: Optional[AgentGateway] = None, app_name: str = config.DIAGNOSE_APP):
        self._gateway = gateway
        self.app_name = app_name

    @property
    def gateway(self) -> AgentGateway:
        return self._gateway or default_gateway()

    def diagnose(self, image: Union[str, ImagePayload]) -> DiagnosisRecord:
        payload = image if isinstance(image, ImagePayload) else ImagePayload.parse(image)
        logger.info("diagnose: mime=%s bytes=%d", payload.mime_type, len(payload.data))

        try:
            raw = self.gateway.run_agent_once(self.app_name, DIAGNOSE_QUERY, image=payload)
            record = parse_record(raw)
        except ModelError as e:
            logger.warning("diagnose: model error: %s", e)
            raise

        try:
            check_contract(record)
        except ContractViolation as e:
            logger.warning(
                "diagnose: contract violation (%d rule(s)): %s | output=%s",
                len(e.violations), "; ".join(e.violations), record.to_wire(),
            )
            raise

        logger.info(
            "diagnose: recognized=%s disease=%r confidence=%s",
            record.is_recognized, record.disease_name, record.confidence.value,
        )
        return record


def diagnose(image: Union[str, ImagePayload]) -> DiagnosisRecord:
    return DiagnosisService().diagnose(image)
