from pathlib import Path

from api_ir.analysis.cache_keys import derive_cache_key_factories, query_key_parts
from api_ir.loader import parse_spec
from api_ir.parser.base import Operation, Param, PrimitiveType, Response, unknown_type

FIXTURES = Path(__file__).parent / "fixtures"


def _make_operation(method: str, path: str, path_params: list[str] = (), query_params: list[str] = ()) -> Operation:
    return Operation(
        operation_id=f"{method.lower()}{path}",
        method=method,
        path=path,
        path_params=[Param(name=n, location="path", required=True, type=PrimitiveType(type="string")) for n in path_params],
        query_params=[Param(name=n, location="query", required=False, type=PrimitiveType(type="string")) for n in query_params],
        response=Response(type=unknown_type()),
    )


class TestDeriveFactories:
    def test_petstore_resources(self):
        spec = parse_spec(FIXTURES / "petstore-openapi3.yaml")
        factories = derive_cache_key_factories(spec.operations)
        assert [f.resource for f in factories] == ["pets", "tags", "categories"]

        pets = factories[0]
        assert pets.singular == "pet"
        assert pets.plural == "pets"
        assert pets.variable_name == "petsKeys"
        assert pets.root_key == ["pets"]
        assert pets.has_list is True
        assert pets.has_detail is True

        categories = factories[2]
        assert categories.singular == "category"
        assert categories.has_list is True
        assert categories.has_detail is False

    def test_write_operations_are_ignored(self):
        factories = derive_cache_key_factories([
            _make_operation("POST", "/orders"),
            _make_operation("DELETE", "/orders/{id}", ["id"]),
        ])
        assert factories == []

    def test_detail_only_resource(self):
        factories = derive_cache_key_factories([_make_operation("GET", "/users/{id}", ["id"])])
        assert len(factories) == 1
        assert factories[0].has_list is False
        assert factories[0].has_detail is True

    def test_hyphenated_resource(self):
        factory = derive_cache_key_factories([_make_operation("GET", "/user-profiles")])[0]
        assert factory.singular == "userProfile"
        assert factory.plural == "userProfiles"
        assert factory.variable_name == "userProfilesKeys"
        assert factory.root_key == ["user-profiles"]


class TestQueryKeyParts:
    def test_detail(self):
        op = _make_operation("GET", "/pets/{petId}", ["petId"])
        assert query_key_parts(op) == ["pets", "detail", "petId"]

    def test_list_with_params(self):
        op = _make_operation("GET", "/pets", query_params=["limit"])
        assert query_key_parts(op) == ["pets", "list", "params"]

    def test_list_without_params(self):
        op = _make_operation("GET", "/pets/{petId}/tags", ["petId"])
        assert query_key_parts(op) == ["tags", "list"]
