"""Load API documents and recognise their format."""

import json
from pathlib import Path

import yaml


def load_document(file_path: Path) -> dict:
    """Read a YAML or JSON document into a mapping.

    Raises ValueError when the file does not hold a mapping.
    """
    text = file_path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        # JSON with tabs or other constructs YAML rejects
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, ValueError) as e:
            raise ValueError(f"{file_path} is neither YAML nor JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{file_path} does not contain a mapping at its root")
    return data


def detect_format(doc: dict) -> str:
    """Detect the API description format of a loaded document.

    Returns: 'openapi3', 'swagger2', or 'unknown'.
    """
    if "openapi" in doc:
        return "openapi3"
    if "swagger" in doc:
        return "swagger2"
    return "unknown"
