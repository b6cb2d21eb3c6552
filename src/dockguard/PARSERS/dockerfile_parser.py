"""
Parsers for Dockerfiles, extracting instructions and arguments.
"""
import json
import logging
import re
import shlex
from typing import Iterator, List, Optional, Tuple
from ..MODELS.dockerfile_ast import BuildInstruction

logger = logging.getLogger(__name__)

KNOWN_INSTRUCTIONS = {
    "add", "arg", "cmd", "copy", "entrypoint", "env", "expose", "from",
    "healthcheck", "label", "maintainer", "onbuild", "run", "shell",
    "stopsignal", "user", "volume", "workdir",
}

# Instructions that accept leading --name=value options
FLAG_INSTRUCTIONS = {"add", "copy", "from", "healthcheck", "run"}

# Instructions whose arguments are either an exec array or one shell string
COMMAND_INSTRUCTIONS = {"cmd", "entrypoint", "run", "shell"}

# Instructions whose whole remainder is a single token
VERBATIM_INSTRUCTIONS = {"maintainer", "onbuild"}

PARSER_DIRECTIVE = re.compile(r'^#\s*([A-Za-z]+)\s*=\s*(\S+)\s*$')
INSTRUCTION_PATTERN = re.compile(r'^([A-Za-z]+)(?:\s+(.*))?$', re.DOTALL)


class DockerfileParseError(ValueError):
    """
    Raised when Dockerfile content cannot be turned into instructions.
    """
    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class DockerfileParser:
    """
    Parser for Dockerfile instructions.
    """
    def parse(self, dockerfile_path: str) -> List[BuildInstruction]:
        """
        Parses a Dockerfile from a file path.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            List[BuildInstruction]: List of parsed instructions.
        """
        with open(dockerfile_path, 'r', encoding='utf-8') as f:
            content = f.read()
        logger.debug("Parsing %s", dockerfile_path)
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> List[BuildInstruction]:
        """
        Parses a Dockerfile from a string content.

        Args:
            content (str): Content of the Dockerfile.

        Returns:
            List[BuildInstruction]: Instructions in declaration order, with
            positions numbered from zero.

        Raises:
            DockerfileParseError: If a line is not a valid instruction.
        """
        instructions = []

        for line_no, logical in self._logical_lines(content):
            match = INSTRUCTION_PATTERN.match(logical)
            if not match:
                raise DockerfileParseError(f"unexpected content {logical!r}", line_no)

            command = match.group(1).lower()
            if command not in KNOWN_INSTRUCTIONS:
                raise DockerfileParseError(f"unknown instruction {match.group(1).upper()}", line_no)

            args_str = (match.group(2) or '').strip()
            flags = []
            if command in FLAG_INSTRUCTIONS:
                flags, args_str = self._split_flags(args_str)
            if not args_str:
                raise DockerfileParseError(f"{command.upper()} requires at least one argument", line_no)

            instructions.append(BuildInstruction(
                command=command,
                arguments=self._split_arguments(command, args_str),
                position=len(instructions),
                flags=flags,
                line=line_no,
                raw=logical,
            ))

        logger.debug("Parsed %d instructions", len(instructions))
        return instructions

    def _logical_lines(self, content: str) -> Iterator[Tuple[int, str]]:
        """
        Yields (starting line number, joined text) for every instruction,
        dropping comments and blank lines and folding continuations.
        """
        escape = '\\'
        in_directives = True
        buffer = []
        start = 0

        for line_no, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()

            if in_directives:
                directive = PARSER_DIRECTIVE.match(stripped)
                if directive:
                    name, value = directive.group(1).lower(), directive.group(2)
                    if name == 'escape' and value in ('\\', '`'):
                        escape = value
                    continue
                # Directives are only honoured before anything else
                in_directives = False

            if not stripped or stripped.startswith('#'):
                continue

            if not buffer:
                start = line_no

            if stripped.endswith(escape):
                buffer.append(stripped[:-1].strip())
                continue

            buffer.append(stripped)
            yield start, ' '.join(part for part in buffer if part)
            buffer = []

        if buffer:
            # A continuation on the last line simply ends the instruction
            yield start, ' '.join(part for part in buffer if part)

    @staticmethod
    def _split_flags(args_str: str) -> Tuple[List[str], str]:
        """
        Separates leading --flag tokens from the rest of the arguments.
        """
        flags = []
        while args_str.startswith('--'):
            parts = args_str.split(None, 1)
            flags.append(parts[0])
            args_str = parts[1].strip() if len(parts) > 1 else ''
        return flags, args_str

    def _split_arguments(self, command: str, args_str: str) -> List[str]:
        """
        Tokenizes the argument text according to the instruction's form.
        """
        if command in COMMAND_INSTRUCTIONS:
            exec_form = self._exec_form(args_str)
            return exec_form if exec_form is not None else [args_str]

        if command == "healthcheck":
            parts = args_str.split(None, 1)
            if len(parts) == 1:
                return [parts[0]]
            exec_form = self._exec_form(parts[1])
            return [parts[0]] + (exec_form if exec_form is not None else [parts[1]])

        if command in VERBATIM_INSTRUCTIONS:
            return [args_str]

        if command == "label":
            return self._shell_tokens(args_str)

        if command == "env":
            first = args_str.split(None, 1)[0]
            if '=' in first:
                return self._shell_tokens(args_str)
            return args_str.split(None, 1)

        exec_form = self._exec_form(args_str)
        return exec_form if exec_form is not None else args_str.split()

    @staticmethod
    def _exec_form(args_str: str) -> Optional[List[str]]:
        """
        Returns the JSON array items, or None if this is not exec form.
        """
        if not (args_str.startswith('[') and args_str.endswith(']')):
            return None
        try:
            value = json.loads(args_str)
        except (json.JSONDecodeError, RecursionError):
            # Not valid JSON or nested too deeply, treated as shell form
            return None
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return None
        return value

    @staticmethod
    def _shell_tokens(args_str: str) -> List[str]:
        try:
            return shlex.split(args_str)
        except ValueError:
            logger.warning("Unbalanced quotes in %r, splitting on whitespace", args_str)
            return args_str.split()
