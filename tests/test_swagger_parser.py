import json
from pathlib import Path

import pytest

from api_resource_resolver.parser.detect import detect_format, load_document
from api_resource_resolver.parser.swagger import parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


class TestDetectFormat:
    def test_detect_openapi_yaml(self):
        assert detect_format(load_document(FIXTURES / "shop.yaml")) == "openapi3"

    def test_detect_swagger2_json(self, tmp_path):
        f = tmp_path / "api.json"
        f.write_text(json.dumps({"swagger": "2.0", "paths": {}}))
        assert detect_format(load_document(f)) == "swagger2"

    def test_detect_unknown_format(self):
        assert detect_format({"info": {}}) == "unknown"

    def test_load_rejects_non_mapping(self, tmp_path):
        f = tmp_path / "doc.md"
        f.write_text("# API Docs\nSome text")
        with pytest.raises(ValueError):
            load_document(f)


class TestOpenApiParser:
    def test_parse_shop_endpoints_count(self):
        endpoints = parse_openapi(FIXTURES / "shop.yaml")
        # OPTIONS is not part of the handled verbs
        assert len(endpoints) == 11

    def test_parse_query_param(self):
        endpoints = parse_openapi(FIXTURES / "shop.yaml")
        get_shops = [e for e in endpoints if e.name == "GET /shops"][0]
        assert get_shops.summary == "List shops"
        assert len(get_shops.parameters) == 1
        assert get_shops.parameters[0].name == "limit"
        assert get_shops.parameters[0].location == "query"
        assert get_shops.parameters[0].param_type == "integer"
        assert get_shops.parameters[0].required is False

    def test_path_level_parameters_are_shared(self):
        endpoints = parse_openapi(FIXTURES / "shop.yaml")
        delete_item = [e for e in endpoints if e.name == "DELETE /shops/{shopId}/items/{itemId}"][0]
        names = [p.name for p in delete_item.parameters]
        assert names == ["shopId", "itemId"]
        assert all(p.location == "path" and p.required for p in delete_item.parameters)

    def test_request_body_becomes_body_param(self):
        endpoints = parse_openapi(FIXTURES / "shop.yaml")
        post_shops = [e for e in endpoints if e.name == "POST /shops"][0]
        body = post_shops.parameters[-1]
        assert body.location == "body"
        assert body.required is True
        assert body.ref_type == "Shop"

    def test_parse_swagger2_body_param(self, tmp_path):
        f = tmp_path / "api.json"
        f.write_text(json.dumps({
            "swagger": "2.0",
            "paths": {
                "/users": {
                    "post": {
                        "parameters": [
                            {"name": "user", "in": "body", "schema": {"$ref": "#/definitions/User"}},
                        ],
                    },
                },
            },
        }))
        endpoints = parse_openapi(f)
        assert len(endpoints) == 1
        param = endpoints[0].parameters[0]
        assert param.location == "body"
        assert param.ref_type == "User"
        assert param.param_type == "object"

    def test_rejects_non_openapi_document(self, tmp_path):
        f = tmp_path / "other.yaml"
        f.write_text("info:\n  title: x\n")
        with pytest.raises(ValueError):
            parse_openapi(f)
