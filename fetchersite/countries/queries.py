"""
Queries describe what to request from the country API, not how.

Each variant carries a ``kind`` tag so callers can branch on the tag
instead of inspecting types.
"""
import enum
from dataclasses import dataclass
from urllib.parse import quote


class QueryKind(enum.Enum):
    NAME = "name"
    CODE = "code"
    REGION = "region"


def _join(base_url: str, *segments: str) -> str:
    path = "/".join(quote(s, safe="") for s in segments)
    return f"{base_url.rstrip('/')}/{path}"


@dataclass(frozen=True)
class NameQuery:
    """Fuzzy (substring) or exact name lookup."""
    name: str
    full_text: bool = False

    kind = QueryKind.NAME

    def build_target(self, base_url: str) -> str:
        full_text = "true" if self.full_text else "false"
        return f"{_join(base_url, 'name', self.name)}?fullText={full_text}"


@dataclass(frozen=True)
class CodeQuery:
    """Lookup by ISO 3166 alpha-2 or alpha-3 code."""
    code: str

    kind = QueryKind.CODE

    def build_target(self, base_url: str) -> str:
        return _join(base_url, "alpha", self.code)


@dataclass(frozen=True)
class RegionQuery:
    """All member countries of a geographical region."""
    region: str

    kind = QueryKind.REGION

    def build_target(self, base_url: str) -> str:
        return _join(base_url, "region", self.region)
