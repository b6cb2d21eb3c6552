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
Plain text report of policy results, one line per finding.
"""
from typing import List
from jinja2 import Template
from ..RUNNERS.policy_runner import FileResult

TEXT_TEMPLATE = """
{% for file in files %}
{% if file.error %}
ERROR - {{ file.filename }} - {{ file.error }}
{% else %}
{% for finding in file.denies %}
FAIL - {{ file.filename }} - main - {{ finding.message }}
{% endfor %}
{% for finding in file.warnings %}
WARN - {{ file.filename }} - main - {{ finding.message }}
{% endfor %}
{% endif %}
{% endfor %}
{% if has_lines %}

{% endif %}
{{ tests }} tests, {{ passed }} passed, {{ warnings }} warnings, {{ failures }} failures, {{ errors }} errors
"""


class TextReporter:
    """
    Renders results in the familiar FAIL/WARN line format followed by a summary.
    """

    def __init__(self):
        self.template = Template(TEXT_TEMPLATE.lstrip("\n"), trim_blocks=True, lstrip_blocks=True)

    def render(self, results: List[FileResult]) -> str:
        """
        Builds the report.

        :param results: Per-file results in the order they were checked.
        :return: The report text, without a trailing newline.
        """
        evaluated = [r.result for r in results if r.result is not None]
        failures = sum(len(r.denies) for r in evaluated)
        warnings = sum(len(r.warnings) for r in evaluated)
        errors = sum(1 for r in results if r.error)

        return self.template.render(
            files=results,
            has_lines=bool(failures or warnings or errors),
            tests=sum(r.rules_evaluated for r in evaluated),
            passed=sum(r.successes for r in evaluated),
            warnings=warnings,
            failures=failures,
            errors=errors,
        ).rstrip("\n")
