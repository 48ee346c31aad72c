from google.adk.agents import LlmAgent

from agrobase import config
from agrobase.agent.prompts import CROP_INSTRUCTIONS_INSTRUCTION
from agrobase.flows import FeatureInstructions

root_agent = LlmAgent(
    name="CropInstructionsWriter",
    instruction=CROP_INSTRUCTIONS_INSTRUCTION,
    model=config.MODEL_NAME,
    output_schema=FeatureInstructions,
    include_contents="none",
)
