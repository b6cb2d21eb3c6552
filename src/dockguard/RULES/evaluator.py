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
Evaluation of the rule table against one instruction sequence.
"""
from typing import Iterable, List, Optional

from ..MODELS.dockerfile_ast import BuildInstruction
from ..MODELS.finding import EvaluationResult, Finding, Severity
from ..MODELS.policy_config import PolicyConfig
from .docker_rules import RULES, Rule


def evaluate(instructions: Iterable[BuildInstruction],
             config: Optional[PolicyConfig] = None,
             rules: Optional[List[Rule]] = None) -> EvaluationResult:
    """
    Runs every rule against the instructions and collects the findings.

    Rules run independently of each other, in table order, and findings of a
    rule keep the declaration order of the instructions that triggered them.
    The input is only read.

    :param instructions: Instructions of one Dockerfile, in declaration order.
    :param config: Policy parameters, the stock policy when omitted.
    :param rules: Rule table to use instead of the built-in one.
    :return: Denies and warnings.
    """
    config = config or PolicyConfig()
    instructions = tuple(instructions)
    denies: List[Finding] = []
    warnings: List[Finding] = []
    evaluated = 0

    for rule in (RULES if rules is None else rules):
        if rule.id in config.exceptions:
            continue
        evaluated += 1
        target = denies if rule.severity is Severity.DENY else warnings
        for inst in rule.check(instructions, config):
            target.append(Finding(
                rule=rule.id,
                severity=rule.severity,
                message=rule.message(inst, config),
                position=inst.position if inst is not None else None,
                line=inst.line if inst is not None else None,
            ))

    return EvaluationResult(denies=denies, warnings=warnings, rules_evaluated=evaluated)


class RuleEvaluator:
    """
    Evaluates instruction sequences against a fixed policy.
    """

    def __init__(self, config: Optional[PolicyConfig] = None):
        """
        :param config: Policy parameters shared by every evaluation.
        """
        self.config = config or PolicyConfig()

    def evaluate(self, instructions: Iterable[BuildInstruction]) -> EvaluationResult:
        return evaluate(instructions, self.config)
