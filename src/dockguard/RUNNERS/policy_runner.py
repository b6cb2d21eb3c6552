"""
Runs the rule set over one or more Dockerfiles.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..MODELS.finding import EvaluationResult
from ..MODELS.policy_config import PolicyConfig
from ..PARSERS.dockerfile_parser import DockerfileParser, DockerfileParseError
from ..RULES.evaluator import RuleEvaluator

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Outcome of checking a single file."""

    filename: str
    result: Optional[EvaluationResult] = None
    error: Optional[str] = None

    @property
    def denies(self):
        return self.result.denies if self.result else []

    @property
    def warnings(self):
        return self.result.warnings if self.result else []


class PolicyRunner:
    """
    Parses Dockerfiles and evaluates them against a policy.
    """

    def __init__(self, config: Optional[PolicyConfig] = None, parser: Optional[DockerfileParser] = None):
        """
        Initializes the runner.

        :param config: Policy parameters, the stock policy when omitted.
        :param parser: Parser used to read the Dockerfiles.
        """
        self.evaluator = RuleEvaluator(config)
        self.parser = parser or DockerfileParser()

    def run_content(self, content: str, filename: str = "-") -> FileResult:
        """
        Parses and evaluates Dockerfile content.

        :param content: Dockerfile text.
        :param filename: Name reported for this content.
        :return: The evaluation, or the parse error.
        """
        try:
            instructions = self.parser.parse_from_string(content)
        except DockerfileParseError as e:
            logger.debug("Failed to parse %s: %s", filename, e)
            return FileResult(filename=filename, error=str(e))
        return FileResult(filename=filename, result=self.evaluator.evaluate(instructions))

    def run_file(self, path: str) -> FileResult:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Failed to read %s: %s", path, e)
            return FileResult(filename=path, error=f"cannot read file: {e}")
        return self.run_content(content, filename=path)

    def run(self, paths: Iterable[str]) -> List[FileResult]:
        """
        Checks every path in order. A file that fails does not stop the others.

        :param paths: Dockerfile paths.
        :return: One result per path.
        """
        results = []
        for path in paths:
            results.append(self.run_file(path))
        logger.debug("Checked %d file(s)", len(results))
        return results


def exit_code(results: Iterable[FileResult], fail_on_warn: bool = False) -> int:
    """
    Process exit code for a set of results.

    0 when clean, 1 on any deny or error. With fail_on_warn, warnings alone
    give 1 and denies or errors give 2.
    """
    results = list(results)
    failed = any(r.error or r.denies for r in results)
    warned = any(r.warnings for r in results)
    if fail_on_warn:
        if failed:
            return 2
        return 1 if warned else 0
    return 1 if failed else 0
