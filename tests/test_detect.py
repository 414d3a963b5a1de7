import pytest

from api_ir.errors import ErrorKind, ParseError
from api_ir.parser.detect import detect_format, get_normalizer, normalize
from api_ir.parser.graphql import normalize_graphql
from api_ir.parser.swagger import normalize_swagger


class TestDetectFormat:
    def test_openapi(self):
        assert detect_format({"openapi": "3.0.3", "paths": {}}) == "openapi"
        assert detect_format({"openapi": "3.1.0"}) == "openapi"

    def test_swagger(self):
        assert detect_format({"swagger": "2.0", "paths": {}}) == "swagger"

    def test_graphql(self):
        assert detect_format({"__schema": {}}) == "graphql"
        assert detect_format({"data": {"__schema": {}}}) == "graphql"
        assert detect_format("type Query { ping: String }") == "graphql"

    def test_unsupported_openapi_version(self):
        with pytest.raises(ParseError) as exc_info:
            detect_format({"openapi": "2.0"})
        assert exc_info.value.kind == ErrorKind.FORMAT_UNRECOGNIZED

    def test_object_preview_lists_first_keys(self):
        doc = {"a": 1, "b": 2, "c": 3, "d": 4, "e": 5, "f": 6}
        with pytest.raises(ParseError) as exc_info:
            detect_format(doc)
        message = exc_info.value.message
        assert message.startswith("Unable to detect API specification format.")
        assert "Object keys: [a, b, c, d, e]." in message
        assert "f" not in message.split("Object keys:")[1].split("]")[0]

    def test_string_preview(self):
        with pytest.raises(ParseError) as exc_info:
            detect_format("hello world")
        assert 'String starts with: "hello world...".' in exc_info.value.message

    def test_string_preview_is_truncated(self):
        with pytest.raises(ParseError) as exc_info:
            detect_format("x" * 200)
        assert '"' + "x" * 80 + '..."' in exc_info.value.message


class TestNormalize:
    def test_get_normalizer(self):
        assert get_normalizer("type Query { ping: String }") is normalize_graphql
        assert get_normalizer({"swagger": "2.0"}) is normalize_swagger

    def test_auto_dispatch(self):
        spec = normalize({"swagger": "2.0", "info": {"title": "Legacy"}, "paths": {}})
        assert spec.title == "Legacy"

    def test_forced_format_bypasses_detection(self):
        spec = normalize({"info": {"title": "No marker"}, "paths": {}}, fmt="openapi")
        assert spec.title == "No marker"

    def test_forced_format_rejects_wrong_shape(self):
        with pytest.raises(ParseError) as exc_info:
            normalize("type Query { ping: String }", fmt="swagger")
        assert exc_info.value.kind == ErrorKind.FORMAT_UNRECOGNIZED

    def test_error_repr(self):
        error = ParseError(ErrorKind.SOURCE_UNREADABLE, "gone")
        assert repr(error) == "ParseError(SOURCE_UNREADABLE, 'gone')"
        assert str(error) == "gone"
