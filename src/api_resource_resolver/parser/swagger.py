"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents into ApiEndpoint models.
Request bodies become a single parameter located in ``body``.
"""

from pathlib import Path

from .base import ApiEndpoint, Param
from .detect import detect_format, load_document

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def parse_openapi(file_path: Path) -> list[ApiEndpoint]:
    """Parse an OpenAPI/Swagger file into a list of ApiEndpoint."""
    doc = load_document(file_path)
    if detect_format(doc) == "unknown":
        raise ValueError(f"{file_path} is not an OpenAPI or Swagger document")
    return parse_openapi_dict(doc)


def parse_openapi_dict(doc: dict) -> list[ApiEndpoint]:
    """Parse an already loaded OpenAPI/Swagger mapping."""
    endpoints = []
    paths = doc.get("paths") or {}

    for path, item in paths.items():
        shared = item.get("parameters", [])
        for method, operation in item.items():
            if method.upper() not in SUPPORTED_METHODS:
                continue

            params = _parse_parameters(_merge_parameters(shared, operation.get("parameters", [])))
            body = _parse_request_body(operation.get("requestBody"))
            if body is not None:
                params.append(body)

            endpoints.append(
                ApiEndpoint(
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary", ""),
                    parameters=params,
                    tags=operation.get("tags", []),
                )
            )

    return endpoints


def _merge_parameters(shared: list[dict], own: list[dict]) -> list[dict]:
    # operation-level parameters override path-level ones with the same (name, in)
    merged = {(p.get("name"), p.get("in")): p for p in shared}
    for p in own:
        merged[(p.get("name"), p.get("in"))] = p
    return list(merged.values())


def _parse_parameters(params: list[dict]) -> list[Param]:
    result = []
    for p in params:
        if "$ref" in p:
            continue
        location = p.get("in", "query")
        # Swagger 2.0 keeps the type on the parameter, OpenAPI 3 under schema
        schema = p.get("schema", {})
        result.append(
            Param(
                name=p["name"],
                location=location,
                required=p.get("required", location == "path"),
                param_type=schema.get("type", p.get("type", "object" if location == "body" else "string")),
                description=p.get("description", ""),
                ref_type=_ref_name(schema) if location == "body" else None,
            )
        )
    return result


def _parse_request_body(body: dict | None) -> Param | None:
    if not body:
        return None
    content = body.get("content", {})
    schema = None
    for content_type in ("application/json", "multipart/form-data"):
        if content_type in content:
            schema = content[content_type].get("schema")
            break
    else:
        # Fallback: first available schema
        for ct_data in content.values():
            schema = ct_data.get("schema")
            break
    schema = schema or {}
    return Param(
        name="body",
        location="body",
        required=body.get("required", False),
        param_type=schema.get("type", "object"),
        description=body.get("description", ""),
        ref_type=_ref_name(schema),
    )


def _ref_name(schema: dict) -> str | None:
    ref = schema.get("$ref")
    if not ref:
        return None
    return ref.rsplit("/", 1)[-1]
