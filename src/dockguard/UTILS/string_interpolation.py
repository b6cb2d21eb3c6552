"""
Utilities for string interpolation using environment variables.
"""
import re
from typing import Mapping


class InterpolationError(ValueError):
    """
    Raised when a placeholder cannot be resolved.
    """


class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in strings.
    Supports ${VAR}, ${VAR:-default}, ${VAR-default}, ${VAR:?message} and
    the $$ escape for a literal dollar sign.
    """
    # Group 1: $$ escape
    # Group 2: VAR name
    # Group 3: modifier, one of ':-', '-', ':?'
    # Group 4: default or error message
    PATTERN = re.compile(r'(\$\$)|\$\{([A-Za-z_][A-Za-z0-9_]*)(?:(:-|-|:\?)([^}]*))?\}')

    @classmethod
    def interpolate(cls, template: str, context: Mapping[str, str]) -> str:
        """
        Interpolates environment variables in the template string using the provided context.

        :param template: The string containing ${VAR} placeholders.
        :param context: The environment variables context.
        :return: The interpolated string.
        :raises InterpolationError: If a variable without a default is unset.
        """
        def replace(match):
            if match.group(1):
                return '$'
            name, modifier, alt_value = match.group(2), match.group(3), match.group(4)
            value = context.get(name)

            if modifier == ':-':
                # Default if unset or empty
                return value if value else alt_value
            if modifier == '-':
                # Default only if unset
                return value if value is not None else alt_value
            if modifier == ':?':
                if not value:
                    raise InterpolationError(alt_value or f"Variable {name} is required")
                return value
            if value is None:
                raise InterpolationError(f"Variable {name} not found in context")
            return value

        return cls.PATTERN.sub(replace, template)
