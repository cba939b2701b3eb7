"""Relations between a resource and database tables."""

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MatchedInfo:
    """Evidence that a token of a resource matches a table."""

    input_indicator: str
    target_matched: str
    similarity: float


@dataclass
class ResourceToTable:
    """Tables related to one resource path.

    Confirmed tables were seen at runtime (an executed insert or an
    observed row); derived tables are guesses from token similarity.
    """

    path: str
    confirmed_set: dict[str, bool] = field(default_factory=dict)
    derived_map: dict[str, list[MatchedInfo]] = field(default_factory=dict)
    param_to_table: dict[str, set[str]] = field(default_factory=dict)

    def confirm(self, table: str) -> None:
        self.confirmed_set[table] = True

    def derive(self, table: str, evidence: MatchedInfo) -> None:
        matched = self.derived_map.setdefault(table, [])
        if evidence not in matched:
            matched.append(evidence)

    def relate_param(self, param_key: str, table: str) -> None:
        self.param_to_table.setdefault(param_key, set()).add(table)

    def has_relation(self) -> bool:
        return bool(self.confirmed_set or self.derived_map or self.param_to_table)


def normalize_name(text: str) -> str:
    name = re.sub(r"[^a-z0-9]", "", text.lower())
    if len(name) > 3 and name.endswith("ies"):
        return name[:-3] + "y"
    if len(name) > 1 and name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def match_tables(words: list[str], tables: list[str]) -> list[MatchedInfo]:
    """Match resource words against table names, plural forms folded.

    A full match of one word scores 1.0; a table whose name is made of
    several consecutive words (``order_items`` for ``/orderItems``) scores
    0.9 on the joined words.
    """
    normalized = {t: normalize_name(t) for t in tables}
    found = []
    singles = [normalize_name(w) for w in words]
    for word, single in zip(words, singles):
        for table, norm in normalized.items():
            if norm and norm == single:
                found.append(MatchedInfo(word, table, 1.0))
    for i in range(len(words) - 1):
        joined = normalize_name("".join(words[i:i + 2]))
        for table, norm in normalized.items():
            if norm and norm == joined:
                found.append(MatchedInfo("".join(words[i:i + 2]), table, 0.9))
    return found
