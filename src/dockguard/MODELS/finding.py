# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Models for rule findings and evaluation results.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


class Severity(str, Enum):
    """
    Severity of a finding. ``deny`` blocks the build, ``warn`` is advisory.
    """

    DENY = "deny"
    WARN = "warn"


class Finding(BaseModel):
    """
    One issue reported by a rule.
    """

    rule: str
    severity: Severity
    message: str
    position: Optional[int] = None  # None for rules about missing instructions
    line: Optional[int] = None


class EvaluationResult(BaseModel):
    """
    Findings produced by one evaluation of one instruction sequence.
    """

    denies: List[Finding] = []
    warnings: List[Finding] = []
    rules_evaluated: int = 0

    @property
    def passed(self) -> bool:
        """True when nothing blocks the build."""
        return not self.denies

    @property
    def findings(self) -> List[Finding]:
        return self.denies + self.warnings

    @property
    def successes(self) -> int:
        """Number of evaluated rules that did not trigger."""
        triggered = {f.rule for f in self.findings}
        return self.rules_evaluated - len(triggered)
