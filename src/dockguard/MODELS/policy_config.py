"""
Models for the policy configuration consumed by the rule evaluator.
"""
from typing import List
from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_ALLOWED_BASE_IMAGES = ["golang:", "alpine:", "distroless/", "scratch"]
DEFAULT_REQUIRED_LABELS = ["maintainer", "version", "description"]
DEFAULT_PRIVILEGED_PORT_LIMIT = 1024

class PolicyConfig(BaseModel):
    """
    Tunable parameters of the rule set.

    The defaults reproduce the stock Docker policy. Rule ids listed in
    ``exceptions`` are skipped entirely.
    """
    model_config = ConfigDict(extra="forbid")

    allowed_base_images: List[str] = list(DEFAULT_ALLOWED_BASE_IMAGES)
    required_labels: List[str] = list(DEFAULT_REQUIRED_LABELS)
    privileged_port_limit: int = DEFAULT_PRIVILEGED_PORT_LIMIT
    allow_stage_references: bool = False
    exceptions: List[str] = []

    @field_validator("exceptions")
    @classmethod
    def _known_rules(cls, value: List[str]) -> List[str]:
        # Imported here, the rule table itself depends on this module.
        from ..RULES.docker_rules import RULE_IDS

        unknown = [rule for rule in value if rule not in RULE_IDS]
        if unknown:
            raise ValueError(f"unknown rule id(s): {', '.join(unknown)}")
        return value
