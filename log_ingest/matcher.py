"""Template-driven field extraction: ${name} placeholders compiled to a regex."""

import re

from log_ingest.errors import FormatTemplateError

DATETIME_FIELD = "datetime"

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")


def _compile(template: str) -> tuple[re.Pattern, list[str]]:
    """Translate a template into an anchored regex and its field names.

    Literal text matches itself, ${name} matches the shortest text that lets
    the rest of the line match, and $$ is a literal dollar sign.
    """
    parts: list[str] = []
    names: list[str] = []
    literal: list[str] = []
    i = 0
    while i < len(template):
        ch = template[i]
        if ch != "$":
            literal.append(ch)
            i += 1
            continue
        nxt = template[i + 1] if i + 1 < len(template) else ""
        if nxt == "$":
            literal.append("$")
            i += 2
            continue
        if nxt != "{":
            literal.append("$")
            i += 1
            continue
        end = template.find("}", i + 2)
        if end == -1:
            raise FormatTemplateError(f"Unterminated placeholder at offset {i} in {template!r}")
        name = template[i + 2:end]
        if not _NAME.match(name):
            raise FormatTemplateError(f"Invalid placeholder name {name!r} in {template!r}")
        if literal:
            parts.append(re.escape("".join(literal)))
            literal = []
        if name in names:
            parts.append(f"(?P={name})")
        else:
            parts.append(f"(?P<{name}>.*?)")
            names.append(name)
        i = end + 1
    if literal:
        parts.append(re.escape("".join(literal)))
    return re.compile("".join(parts), re.DOTALL), names


class FormatMatcher:
    """Extracts named fields from a line according to a format template."""

    def __init__(self, template: str):
        self._template = template
        self._regex, self._fields = _compile(template)

    @property
    def template(self) -> str:
        return self._template

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    def match(self, line: str) -> dict[str, str] | None:
        """Return {field: value} for a matching line, None otherwise."""
        m = self._regex.fullmatch(line)
        if m is None:
            return None
        return m.groupdict()
