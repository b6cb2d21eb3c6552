"""
JSON report of policy results.
"""
import json
from typing import Any, Dict, List
from ..MODELS.dockerfile_ast import BuildInstruction
from ..MODELS.finding import Finding
from ..RUNNERS.policy_runner import FileResult


class JsonReporter:
    """
    Renders results as a JSON list with one entry per file.
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, results: List[FileResult]) -> str:
        return json.dumps([self._file_entry(r) for r in results], indent=self.indent)

    def _file_entry(self, file_result: FileResult) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "filename": file_result.filename,
            "namespace": "main",
            "successes": file_result.result.successes if file_result.result else 0,
            "failures": [self._finding_entry(f) for f in file_result.denies],
            "warnings": [self._finding_entry(f) for f in file_result.warnings],
        }
        if file_result.error:
            entry["error"] = file_result.error
        return entry

    @staticmethod
    def _finding_entry(finding: Finding) -> Dict[str, Any]:
        return {
            "msg": finding.message,
            "metadata": {"rule": finding.rule, "position": finding.position, "line": finding.line},
        }


def dump_instructions(instructions: List[BuildInstruction], indent: int = 2) -> str:
    """
    Serializes parsed instructions, as printed by the ``parse`` command.
    """
    return json.dumps([i.model_dump() for i in instructions], indent=indent)
