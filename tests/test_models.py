from api_resource_resolver.parser.base import ApiEndpoint, Param
from api_resource_resolver.resource.actions import DbAction, HttpVerb, RestCallAction


class TestParam:
    def test_create_required_param(self):
        p = Param(name="id", location="path", required=True, param_type="integer")
        assert p.name == "id"
        assert p.required is True
        assert p.description == ""
        assert p.ref_type is None
        assert p.is_path()
        assert not p.is_body()


class TestApiEndpoint:
    def test_create_minimal_endpoint(self):
        ep = ApiEndpoint(method="GET", path="/api/users")
        assert ep.parameters == []
        assert ep.name == "GET /api/users"


class TestRestCallAction:
    def _action(self):
        return RestCallAction.from_endpoint(
            ApiEndpoint(
                method="delete",
                path="/api/users/{id}",
                parameters=[Param(name="id", location="path", required=True, param_type="integer")],
            )
        )

    def test_from_endpoint(self):
        action = self._action()
        assert action.verb == HttpVerb.DELETE
        assert action.get_name() == "DELETE:/api/users/{id}"
        assert action.rest_path.levels() == 3
        assert action.save_location is False
        assert action.location_id is None

    def test_copy_is_independent(self):
        action = self._action()
        copy = action.copy_action()
        copy.save_location = True
        copy.parameters[0].description = "changed"
        assert action.save_location is False
        assert action.parameters[0].description == ""

    def test_bind_to_same_path_resolution(self):
        action = self._action()
        other = Param(name="ID", location="path", required=True, param_type="string", description="bound")
        action.bind_to_same_path_resolution([other, Param(name="id", location="query")])
        assert action.parameters[0].description == "bound"
        assert action.parameters[0].param_type == "string"


class TestDbAction:
    def test_name(self):
        assert DbAction(table="ITEM").get_name() == "SQL_Insert_ITEM"
