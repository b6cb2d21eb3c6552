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
Dockerfile compliance rules.

Each rule is a plain predicate over the full instruction sequence. A check
yields the instruction that triggered it, or ``None`` once for rules that
report something missing from the whole file. Rules never raise on odd
input: an argument that cannot be interpreted makes the rule skip that
instruction.
"""
import re
from typing import Callable, Iterator, List, NamedTuple, Optional, Sequence, Set

from ..MODELS.dockerfile_ast import BuildInstruction
from ..MODELS.finding import Severity
from ..MODELS.policy_config import PolicyConfig

Instructions = Sequence[BuildInstruction]
Check = Callable[[Instructions, PolicyConfig], Iterator[Optional[BuildInstruction]]]
MessageBuilder = Callable[[Optional[BuildInstruction], PolicyConfig], str]

INTEGER_PATTERN = re.compile(r'[+-]?\d+')


class Rule(NamedTuple):
    """A single entry of the rule table."""

    id: str
    severity: Severity
    check: Check
    message: MessageBuilder
    description: str


def _with_command(instructions: Instructions, command: str) -> Iterator[BuildInstruction]:
    return (inst for inst in instructions if inst.command == command)


def _has_command(instructions: Instructions, command: str) -> bool:
    return any(inst.command == command for inst in instructions)


def _parse_port(value: Optional[str]) -> Optional[int]:
    """Integer value of an EXPOSE argument, None if it is not a plain integer."""
    if value is None or not INTEGER_PATTERN.fullmatch(value):
        return None
    return int(value)


def _stage_name(inst: BuildInstruction) -> Optional[str]:
    args = inst.arguments
    if len(args) >= 3 and args[1].lower() == "as":
        return args[2].lower()
    return None


def root_user(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    for inst in _with_command(instructions, "user"):
        if inst.first_argument == "root":
            yield inst


def missing_user(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    if not _has_command(instructions, "user"):
        yield None


def privileged_port(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    for inst in _with_command(instructions, "expose"):
        port = _parse_port(inst.first_argument)
        if port is not None and port < config.privileged_port_limit:
            yield inst


def disallowed_base_image(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    """
    Flags FROM instructions whose image does not start with an allowed
    prefix. Earlier stage names count as allowed only when the policy
    says so.
    """
    prefixes = tuple(config.allowed_base_images)
    stages: Set[str] = set()
    for inst in _with_command(instructions, "from"):
        image = inst.first_argument
        if image is not None:
            allowed = image.startswith(prefixes)
            if not allowed and config.allow_stage_references:
                allowed = image.lower() in stages
            if not allowed:
                yield inst
        stage = _stage_name(inst)
        if stage:
            stages.add(stage)


def add_instruction(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    yield from _with_command(instructions, "add")


def missing_healthcheck(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    if not _has_command(instructions, "healthcheck"):
        yield None


def _run_uses(tool: str) -> Check:
    def check(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
        for inst in _with_command(instructions, "run"):
            command = inst.first_argument
            if command is not None and tool in command:
                yield inst

    check.__name__ = f"{tool}_in_run"
    return check


def missing_labels(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    # Loose match: a key counts as present if it is a substring of any token
    tokens = [token for inst in _with_command(instructions, "label") for token in inst.arguments]
    if not all(any(label in token for token in tokens) for label in config.required_labels):
        yield None


def _shell_form(command: str) -> Check:
    def check(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
        for inst in _with_command(instructions, command):
            if len(inst.arguments) == 1:
                yield inst

    check.__name__ = f"shell_form_{command}"
    return check


def from_without_arg(instructions: Instructions, config: PolicyConfig) -> Iterator[Optional[BuildInstruction]]:
    """
    Flags every FROM after the first instruction that does not directly
    follow an ARG instruction.
    """
    for index, inst in enumerate(instructions):
        if inst.command != "from" or inst.position <= 0:
            continue
        previous = instructions[index - 1] if index > 0 else None
        if previous is None or previous.command != "arg":
            yield inst


def _port_message(inst: Optional[BuildInstruction], config: PolicyConfig) -> str:
    return (
        f"Port {inst.first_argument} is a privileged port, "
        f"expose a port of {config.privileged_port_limit} or above"
    )


def _image_message(inst: Optional[BuildInstruction], config: PolicyConfig) -> str:
    return f"Base image '{inst.first_argument}' is not from an approved source"


def _labels_message(inst: Optional[BuildInstruction], config: PolicyConfig) -> str:
    return f"Image must define the labels: {', '.join(config.required_labels)}"


def _fixed(text: str) -> MessageBuilder:
    return lambda inst, config: text


RULES: List[Rule] = [
    Rule("root-user", Severity.DENY, root_user,
         _fixed("Container must not run as the root user"),
         "USER instruction switches to root"),
    Rule("missing-user", Severity.DENY, missing_user,
         _fixed("Container must declare a non-root USER"),
         "no USER instruction in the file"),
    Rule("privileged-port", Severity.DENY, privileged_port,
         _port_message,
         "EXPOSE of a port below the privileged limit"),
    Rule("disallowed-base-image", Severity.DENY, disallowed_base_image,
         _image_message,
         "FROM image outside the allowed prefixes"),
    Rule("add-instruction", Severity.DENY, add_instruction,
         _fixed("Use COPY instead of ADD"),
         "ADD instruction used"),
    Rule("missing-healthcheck", Severity.DENY, missing_healthcheck,
         _fixed("Container must define a HEALTHCHECK"),
         "no HEALTHCHECK instruction in the file"),
    Rule("curl-in-run", Severity.DENY, _run_uses("curl"),
         _fixed("Avoid using curl in RUN instructions"),
         "RUN command mentions curl"),
    Rule("wget-in-run", Severity.DENY, _run_uses("wget"),
         _fixed("Avoid using wget in RUN instructions"),
         "RUN command mentions wget"),
    Rule("missing-labels", Severity.DENY, missing_labels,
         _labels_message,
         "required LABEL keys are not all present"),
    Rule("shell-form-run", Severity.DENY, _shell_form("run"),
         _fixed("Use exec form for RUN instructions"),
         "RUN written in shell form"),
    Rule("shell-form-cmd", Severity.DENY, _shell_form("cmd"),
         _fixed("Use exec form for CMD instructions"),
         "CMD written in shell form"),
    Rule("shell-form-entrypoint", Severity.DENY, _shell_form("entrypoint"),
         _fixed("Use exec form for ENTRYPOINT instructions"),
         "ENTRYPOINT written in shell form"),
    Rule("arg-before-from", Severity.WARN, from_without_arg,
         _fixed("Consider declaring an ARG before FROM to parameterize the base image"),
         "FROM not directly preceded by an ARG"),
]

RULE_IDS = [rule.id for rule in RULES]
