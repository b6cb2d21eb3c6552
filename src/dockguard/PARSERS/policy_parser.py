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
Parsers for policy configuration YAML files.
"""
import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..MODELS.policy_config import PolicyConfig
from ..UTILS.string_interpolation import EnvironmentInterpolator, InterpolationError

logger = logging.getLogger(__name__)


class PolicyConfigError(ValueError):
    """
    Raised when a policy file cannot be loaded or validated.
    """


class PolicyParser:
    """
    Parser for policy configuration files.
    """
    def __init__(self, context: Optional[Mapping[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A mapping of environment variables for interpolation.
        """
        self.context: Dict[str, str] = dict(os.environ if context is None else context)

    @classmethod
    def with_env_file(cls, env_path: str, context: Optional[Mapping[str, str]] = None) -> "PolicyParser":
        """
        Creates a parser whose context is extended with the variables of a dotenv file.

        Variables already present in the context win over the file.

        :param env_path: Path to the dotenv file.
        :param context: Base context, the process environment when omitted.
        :return: A PolicyParser instance.
        """
        if not os.path.isfile(env_path):
            raise PolicyConfigError(f"Environment file {env_path} not found")
        base = dict(os.environ if context is None else context)
        merged = {k: v for k, v in dotenv_values(env_path).items() if v is not None}
        logger.debug("Loaded %d variables from %s", len(merged), env_path)
        merged.update(base)
        return cls(merged)

    def parse(self, policy_path: str) -> PolicyConfig:
        """
        Parses a policy file from a path.

        :param policy_path: Path to the policy file.
        :return: Validated policy configuration.
        """
        try:
            with open(policy_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise PolicyConfigError(f"Cannot read policy file {policy_path}: {e}") from e
        logger.debug("Loading policy from %s", policy_path)
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> PolicyConfig:
        """
        Parses a policy file from a string.

        :param content: YAML content of the policy file.
        :return: Validated policy configuration.
        :raises PolicyConfigError: If the content is not a valid policy.
        """
        # Interpolate variables before parsing YAML
        try:
            content = EnvironmentInterpolator.interpolate(content, self.context)
        except InterpolationError as e:
            raise PolicyConfigError(f"Interpolation failed: {e}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise PolicyConfigError(f"Invalid YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PolicyConfigError("Policy file must contain a mapping at the top level")

        return self._build_config(data)

    @staticmethod
    def _build_config(data: Dict[str, Any]) -> PolicyConfig:
        try:
            return PolicyConfig.model_validate(data)
        except ValidationError as e:
            raise PolicyConfigError(f"Invalid policy: {e}") from e
