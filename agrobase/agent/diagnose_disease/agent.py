from google.adk.agents import LlmAgent

from agrobase import config
from agrobase.agent.prompts import DIAGNOSE_INSTRUCTION
from agrobase.diagnosis.schema import DiagnosisRecord

# Schema-constrained output; the service still re-checks every branch rule.
root_agent = LlmAgent(
    name="DiagnosisAgent",
    instruction=DIAGNOSE_INSTRUCTION,
    model=config.MODEL_NAME,
    output_schema=DiagnosisRecord,
    include_contents="none",
)
