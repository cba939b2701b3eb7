"""Endpoint catalog models.

Document parsers convert their input into these models; the resource
layer groups them by path and turns each one into a call action.
"""

from pydantic import BaseModel


class Param(BaseModel):
    """A single API parameter (path, query, header, cookie, or body)."""

    name: str
    location: str  # path / query / header / cookie / body
    required: bool = False
    param_type: str = "string"  # string / integer / boolean / array / object
    description: str = ""
    ref_type: str | None = None  # schema name referenced by a body parameter

    def is_path(self) -> bool:
        return self.location == "path"

    def is_body(self) -> bool:
        return self.location == "body"


class ApiEndpoint(BaseModel):
    """One (verb, path, parameters) entry of the endpoint catalog."""

    method: str  # GET / POST / PUT / DELETE / PATCH
    path: str  # /api/users/{id}
    summary: str = ""
    parameters: list[Param] = []
    tags: list[str] = []

    @property
    def name(self) -> str:
        return f"{self.method} {self.path}"
