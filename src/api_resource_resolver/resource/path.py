"""Parsed resource paths.

A path such as ``/shops/{shopId}/items`` is split on ``/`` into elements.
An element is a parameter when it is exactly ``{name}``. An element that
embeds a variable inside literal text (``{id}.json``) stays a literal but
still counts as variable.
"""

import re

_VARIABLE = re.compile(r"\{([^{}]+)\}")


class PathElement:
    __slots__ = ("text", "is_parameter", "variables")

    def __init__(self, text: str):
        self.text = text
        self.variables = _VARIABLE.findall(text)
        self.is_parameter = bool(_VARIABLE.fullmatch(text))

    @property
    def name(self) -> str:
        """Parameter name without braces, or the literal text."""
        return self.variables[0] if self.is_parameter else self.text

    def matches(self, other: "PathElement") -> bool:
        if self.is_parameter or other.is_parameter:
            return self.is_parameter and other.is_parameter
        return self.text == other.text

    def __repr__(self) -> str:
        return f"PathElement({self.text!r})"


class RestPath:
    """An API path made of literal and parameter elements."""

    def __init__(self, text: str):
        self.text = "/" + text.strip().strip("/")
        self.elements = [PathElement(e) for e in self.text.strip("/").split("/") if e]

    def levels(self) -> int:
        return len(self.elements)

    def is_last_element_a_parameter(self) -> bool:
        return bool(self.elements) and self.elements[-1].is_parameter

    def has_variable_path_parameters(self) -> bool:
        return any(e.variables for e in self.elements)

    def get_variable_names(self) -> list[str]:
        return [v for e in self.elements for v in e.variables]

    def get_non_parameter_tokens(self) -> list[str]:
        return [e.text for e in self.elements if not e.is_parameter]

    def last_element(self) -> str:
        return self.elements[-1].text if self.elements else ""

    def is_equivalent(self, other: "RestPath") -> bool:
        """Same shape, parameter names ignored."""
        if self.levels() != other.levels():
            return False
        return all(a.matches(b) for a, b in zip(self.elements, other.elements))

    def is_ancestor_of(self, other: "RestPath") -> bool:
        """True when this path is a strict prefix of ``other``."""
        if self.levels() >= other.levels():
            return False
        return all(a.matches(b) for a, b in zip(self.elements, other.elements))

    def __eq__(self, other) -> bool:
        return isinstance(other, RestPath) and self.text == other.text

    def __hash__(self) -> int:
        return hash(self.text)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"RestPath({self.text!r})"
