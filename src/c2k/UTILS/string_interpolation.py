"""
Utilities for string interpolation using environment variables.
"""
import logging
import re
from typing import Dict

logger = logging.getLogger(__name__)

# $$ | ${VAR} ${VAR:-x} ${VAR-x} ${VAR:+x} ${VAR+x} | $VAR
_PATTERN = re.compile(
    r'\$(?:(?P<escaped>\$)'
    r'|\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<modifier>:?[-+])(?P<alt>[^}]*))?\}'
    r'|(?P<named>[A-Za-z_][A-Za-z0-9_]*))'
)

class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in compose text.
    Supports $VAR, ${VAR}, ${VAR:-default}, ${VAR-default}, ${VAR:+value},
    ${VAR+value} and $$ as a literal dollar sign.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str]) -> str:
        """
        Interpolates environment variables in the template string using the provided context.

        Unset variables without a default resolve to an empty string, as
        docker-compose does, and are reported with a warning.

        :param template: The string containing $VAR / ${VAR} placeholders.
        :param context: The environment variables context.
        :return: The interpolated string.
        """
        def replace(match):
            if match.group('escaped'):
                return '$'

            var_name = match.group('braced') or match.group('named')
            modifier = match.group('modifier')
            alt_value = match.group('alt') or ''
            value = context.get(var_name)

            if modifier == ':-':
                return value if value else alt_value
            if modifier == '-':
                return value if value is not None else alt_value
            if modifier == ':+':
                return alt_value if value else ''
            if modifier == '+':
                return alt_value if value is not None else ''

            if value is None:
                logger.warning("The %s variable is not set. Defaulting to a blank string.", var_name)
                return ''
            return value

        return _PATTERN.sub(replace, template)
