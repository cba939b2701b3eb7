"""Path tokenizer and segmenter.

Every element of a path becomes a PathToken whose level is its position
among the ``/``-separated elements. Literal tokens between two parameters
form a segment, e.g. ``/A/{a}/B/c/{b}`` has the segments ``A`` and ``B@c``.
Segments are available raw (original texts) and flattened (lower-cased
sub-words, so ``/shopItems`` flattens to ``shop@items``).
"""

import re
from dataclasses import dataclass

from .path import RestPath

SEGMENT_SEPARATOR = "@"

_WORD_BOUNDARY = re.compile(r"[_\-.\s]+|(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@dataclass(frozen=True)
class PathToken:
    original_text: str
    level: int
    is_parameter: bool
    nearest_param_level: int
    segment: str = ""
    sub_tokens: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return self.original_text.lower()

    def is_star(self) -> bool:
        return self.original_text == "*"

    def flat_keys(self) -> list[str]:
        return list(self.sub_tokens) if self.sub_tokens else [self.key]


def split_words(text: str) -> tuple[str, ...]:
    """Split a compound word into lower-case sub-words.

    Returns an empty tuple when the text is a single word.
    """
    words = [w.lower() for w in _WORD_BOUNDARY.split(text) if w]
    return tuple(words) if len(words) > 1 else ()


def parse_path_tokens(path: RestPath, sub_split: bool = True) -> dict[str, PathToken]:
    """Tokenize ``path`` into an ordered mapping keyed by original text.

    A repeated text is keyed with its level appended so no token is lost.
    """
    if not path.get_non_parameter_tokens():
        return {}

    tokens: dict[str, PathToken] = {}
    nearest = -1
    pending: list[str] = []
    for level, element in enumerate(path.elements):
        if element.is_parameter:
            token = PathToken(
                original_text=element.name,
                level=level,
                is_parameter=True,
                nearest_param_level=nearest,
                segment=SEGMENT_SEPARATOR.join(pending),
            )
            nearest = level
            pending = []
        else:
            pending.append(element.text)
            token = PathToken(
                original_text=element.text,
                level=level,
                is_parameter=False,
                nearest_param_level=nearest,
                segment=SEGMENT_SEPARATOR.join(pending),
                sub_tokens=split_words(element.text) if sub_split else (),
            )
        key = token.original_text if token.original_text not in tokens else f"{token.original_text}#{level}"
        tokens[key] = token
    return tokens


def token_at(tokens: dict[str, PathToken], level: int) -> PathToken | None:
    """Token on ``level``, falling back to the last token."""
    if not tokens:
        return None
    for token in tokens.values():
        if token.level == level:
            return token
    return list(tokens.values())[-1]


def segment_of(tokens: dict[str, PathToken], target: PathToken, flatten: bool) -> str:
    if not flatten:
        return target.segment
    near = target.nearest_param_level
    words = []
    for t in tokens.values():
        if t.is_parameter or t.level <= near:
            continue
        if t.level < target.level or (not target.is_parameter and t.level == target.level):
            words.extend(t.flat_keys())
    return SEGMENT_SEPARATOR.join(words)


def segment_at(tokens: dict[str, PathToken], level: int, flatten: bool) -> str:
    target = token_at(tokens, level)
    if target is None:
        return ""
    return segment_of(tokens, target, flatten)


def build_segments(tokens: dict[str, PathToken], path: RestPath) -> tuple[list[str], list[str]]:
    """Raw and flattened segment views of a tokenized path.

    A segment exists for every parameter level, plus one implicit trailing
    level when the path does not end with a parameter.
    """
    if not tokens:
        return [], []
    levels = {t.level for t in tokens.values() if t.is_parameter}
    if not path.is_last_element_a_parameter():
        levels.add(path.levels())
    ordered = sorted(levels)
    return (
        [segment_at(tokens, lv, False) for lv in ordered],
        [segment_at(tokens, lv, True) for lv in ordered],
    )
