import random
import string
import pytest
from dockguard.MODELS.dockerfile_ast import BuildInstruction
from dockguard.PARSERS.dockerfile_parser import DockerfileParser, DockerfileParseError
from dockguard.PARSERS.policy_parser import PolicyParser, PolicyConfigError
from dockguard.RULES.docker_rules import RULES
from dockguard.RULES.evaluator import evaluate

COMMANDS = ["from", "run", "user", "expose", "label", "cmd", "entrypoint", "healthcheck", "add", "arg", "copy"]
TOKENS = ["root", "80", "8080", "curl", "wget x", "alpine:3", "ubuntu", "maintainer=x", "", "-1", "CMD"]

def random_string(rng, length):
    return ''.join(rng.choice(string.printable) for _ in range(length))

def random_instructions(rng):
    instructions = []
    for position in range(rng.randint(0, 20)):
        arguments = [rng.choice(TOKENS) for _ in range(rng.randint(0, 3))]
        instructions.append(BuildInstruction(command=rng.choice(COMMANDS), arguments=arguments, position=position))
    return instructions

def test_fuzz_dockerfile_parser():
    rng = random.Random(1234)
    parser = DockerfileParser()
    for _ in range(200):
        content = random_string(rng, rng.randint(0, 1000))
        try:
            parser.parse_from_string(content)
        except DockerfileParseError:
            # Rejecting junk is fine, any other exception is a bug
            pass

def test_fuzz_instruction_lines():
    rng = random.Random(99)
    parser = DockerfileParser()
    for _ in range(200):
        lines = []
        for _ in range(rng.randint(1, 10)):
            lines.append(rng.choice(COMMANDS).upper() + " " + random_string(rng, rng.randint(1, 40)).replace("\n", " "))
        try:
            instructions = parser.parse_from_string("\n".join(lines))
        except DockerfileParseError:
            continue
        evaluate(instructions)

def test_fuzz_evaluator_never_raises():
    rng = random.Random(42)
    for _ in range(500):
        result = evaluate(random_instructions(rng))
        assert result.rules_evaluated == len(RULES)
        assert all(f.severity.value == "deny" for f in result.denies)
        assert all(f.severity.value == "warn" for f in result.warnings)

def test_fuzz_policy_parser():
    rng = random.Random(7)
    parser = PolicyParser(context={})
    for _ in range(100):
        try:
            parser.parse_from_string(random_string(rng, rng.randint(0, 300)))
        except PolicyConfigError:
            pass

def test_edge_cases_parsers():
    parser = DockerfileParser()

    # Empty string
    assert parser.parse_from_string("") == []

    # Only whitespace
    assert parser.parse_from_string("   \n\t  ") == []

    # Very long line
    (run,) = parser.parse_from_string("RUN " + "a" * 10000)
    assert len(run.arguments[0]) == 10000

    # Many line continuations
    (run,) = parser.parse_from_string("RUN echo \\\n" * 100 + "hello")
    assert run.arguments[0].endswith("echo hello")

    # Trailing continuation at end of file
    (run,) = parser.parse_from_string("RUN echo \\")
    assert run.arguments == ["echo"]

def test_deeply_nested_exec_form():
    parser = DockerfileParser()
    nested = "[" * 100000 + "]" * 100000
    (cmd,) = parser.parse_from_string("CMD " + nested)
    assert cmd.arguments == [nested]

    # Shallow nesting decodes but is not a list of strings
    (run,) = parser.parse_from_string('RUN [["echo"]]')
    assert run.arguments == ['[["echo"]]']
