"""Locate bind parameter placeholders in an AQL template."""

import re
from dataclasses import dataclass, field
from typing import List

# Same shape ArangoDB's tokenizer accepts after '@' / '@@'
BIND_NAME_RE = re.compile(r"_+[A-Za-z0-9][A-Za-z0-9_]*|[A-Za-z0-9][A-Za-z0-9_]*")

_QUOTES = {"'": "'", '"': '"', "`": "`", "´": "´"}


@dataclass(frozen=True)
class Placeholder:
    """A bind parameter reference found in a template."""
    name: str
    collection: bool = False  # '@@name' binds a collection name

    @property
    def token(self) -> str:
        return ("@@" if self.collection else "@") + self.name

    @property
    def bind_key(self) -> str:
        """Key used in the driver's bind_vars mapping."""
        return ("@" if self.collection else "") + self.name


@dataclass
class ScanResult:
    placeholders: List[Placeholder] = field(default_factory=list)
    unsupported: List[str] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        """Distinct placeholder names in order of first appearance."""
        seen = []
        for p in self.placeholders:
            if p.name not in seen:
                seen.append(p.name)
        return seen


def scan_placeholders(template: str) -> ScanResult:
    """
    Scan a template for '@name' and '@@name' references.

    String literals, quoted identifiers and comments are skipped, so an
    '@' inside "user@example.com" is not treated as a placeholder.
    """
    result = ScanResult()
    i = 0
    n = len(template)

    while i < n:
        ch = template[i]

        if ch in _QUOTES:
            i = _skip_quoted(template, i + 1, _QUOTES[ch])
            continue

        if template.startswith("//", i):
            end = template.find("\n", i)
            i = n if end == -1 else end + 1
            continue

        if template.startswith("/*", i):
            end = template.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        if ch == "@":
            collection = template.startswith("@@", i)
            start = i + (2 if collection else 1)
            match = BIND_NAME_RE.match(template, start)
            if match:
                result.placeholders.append(Placeholder(match.group(0), collection))
                i = match.end()
            else:
                result.unsupported.append(_bad_token(template, i))
                i = start
            continue

        i += 1

    return result


def _skip_quoted(template: str, i: int, closing: str) -> int:
    """Return the index just past the closing quote (backslash escapes honoured)."""
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "\\":
            i += 2
            continue
        if ch == closing:
            return i + 1
        i += 1
    return n


def _bad_token(template: str, i: int) -> str:
    end = i + 1
    while end < len(template) and not template[end].isspace() and end - i < 32:
        end += 1
    return template[i:end]
