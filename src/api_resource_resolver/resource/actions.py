"""Actions that can appear in a generated call sequence."""

from enum import Enum
from typing import Any

from pydantic import BaseModel

from api_resource_resolver.parser.base import ApiEndpoint, Param
from .path import RestPath


class HttpVerb(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    TRACE = "TRACE"


class RestCallAction(BaseModel):
    """One HTTP call on a resource path.

    ``save_location`` asks the executor to keep the location returned by
    this call; ``location_id`` names the saved location whose id fills this
    call's path parameter.
    """

    verb: HttpVerb
    path: str
    parameters: list[Param] = []
    save_location: bool = False
    location_id: str | None = None

    @classmethod
    def from_endpoint(cls, endpoint: ApiEndpoint) -> "RestCallAction":
        return cls(
            verb=HttpVerb(endpoint.method.upper()),
            path=endpoint.path,
            parameters=[p.model_copy() for p in endpoint.parameters],
        )

    @property
    def rest_path(self) -> RestPath:
        return RestPath(self.path)

    def get_name(self) -> str:
        return f"{self.verb.value}:{self.path}"

    def copy_action(self) -> "RestCallAction":
        return self.model_copy(deep=True)

    def bind_to_same_path_resolution(self, params: list[Param]) -> None:
        """Share path parameters with another action on the same path."""
        by_name = {p.name.lower(): p for p in params if p.is_path()}
        for i, p in enumerate(self.parameters):
            if p.is_path() and p.name.lower() in by_name:
                self.parameters[i] = by_name[p.name.lower()].model_copy()


class DbAction(BaseModel):
    """Insertion of one row into a table, used as a creation shortcut."""

    table: str
    columns: dict[str, Any] = {}

    def get_name(self) -> str:
        return f"SQL_Insert_{self.table}"
