"""Variable expansion for endpoint URL templates."""

import re
from typing import Mapping

from .models import ExpansionError

# $$ | ${NAME} | $NAME | ${ without a closing brace; dots are allowed only inside braces
_TOKEN = re.compile(
    r"\$(?:(?P<escaped>\$)|\{(?P<braced>[^}]*)\}|(?P<named>[A-Za-z_][A-Za-z0-9_]*)|(?P<open>\{))"
)
_VALID_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*\Z")


def expand_variables(template: str, env: Mapping[str, str]) -> str:
    """Expand ``${NAME}`` and ``$NAME`` references against ``env``.

    Unknown variables are left untouched and ``$$`` yields a literal ``$``. A bare
    ``$NAME`` ends at the first character that is not a letter, digit or
    underscore, so ``$JOB_NAME.json`` expands ``JOB_NAME``.

    Raises:
        ExpansionError: On an unterminated ``${`` or an invalid variable name

    Example:
        >>> expand_variables("http://ci/${JOB_NAME}/$BUILD_NUMBER", {"JOB_NAME": "app", "BUILD_NUMBER": "7"})
        'http://ci/app/7'
    """

    def replace(match: "re.Match[str]") -> str:
        if match.group("escaped"):
            return "$"
        if match.group("open"):
            raise ExpansionError(
                f"Unterminated variable reference at position {match.start()} in '{template}'"
            )
        name = match.group("braced")
        if name is None:
            name = match.group("named")
        elif not _VALID_NAME.match(name):
            raise ExpansionError(f"Invalid variable name '{name}' in '{template}'")
        return env.get(name, match.group(0))

    return _TOKEN.sub(replace, template)
