from google.adk.agents import LlmAgent

from agrobase import config
from agrobase.agent.prompts import ANIMAL_SUMMARY_INSTRUCTION
from agrobase.flows import DiseaseSummary

root_agent = LlmAgent(
    name="AnimalDiseaseSummarizer",
    instruction=ANIMAL_SUMMARY_INSTRUCTION,
    model=config.MODEL_NAME,
    output_schema=DiseaseSummary,
    include_contents="none",
)
