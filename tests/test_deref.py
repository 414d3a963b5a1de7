import copy
import logging

from api_ir.parser.deref import dereference, ref_name, split_ref


class TestRefNames:
    def test_split_ref(self):
        assert split_ref("common.yaml#/components/schemas/Error") == ("common.yaml", "/components/schemas/Error")
        assert split_ref("#/definitions/Pet") == ("", "/definitions/Pet")
        assert split_ref("common.yaml") == ("common.yaml", "")

    def test_ref_name_decodes_pointer_escapes(self):
        assert ref_name("#/components/schemas/Pet") == "Pet"
        assert ref_name("#/definitions/a~1b") == "a/b"
        assert ref_name("#/definitions/a~0b") == "a~b"


class TestDereference:
    def test_inlines_local_ref(self):
        doc = {
            "schema": {"$ref": "#/defs/Name"},
            "defs": {"Name": {"type": "string"}},
        }
        assert dereference(doc)["schema"] == {"type": "string"}

    def test_input_is_not_mutated(self):
        doc = {
            "schema": {"$ref": "#/defs/Name"},
            "defs": {"Name": {"type": "string"}},
        }
        original = copy.deepcopy(doc)
        dereference(doc)
        assert doc == original

    def test_recursive_ref_is_left_in_place(self):
        doc = {
            "defs": {
                "Node": {
                    "type": "object",
                    "properties": {"next": {"$ref": "#/defs/Node"}},
                },
            },
            "root": {"$ref": "#/defs/Node"},
        }
        result = dereference(doc)
        assert result["defs"]["Node"]["properties"]["next"] == {"$ref": "#/defs/Node"}
        assert result["root"]["properties"]["next"] == {"$ref": "#/defs/Node"}

    def test_mutual_recursion_terminates(self):
        doc = {
            "defs": {
                "A": {"properties": {"b": {"$ref": "#/defs/B"}}},
                "B": {"properties": {"a": {"$ref": "#/defs/A"}}},
            },
        }
        result = dereference(doc)
        assert result["defs"]["A"]["properties"]["b"]["properties"]["a"] == {"$ref": "#/defs/A"}

    def test_refs_inside_lists(self):
        doc = {
            "oneOf": [{"$ref": "#/defs/A"}, {"type": "null"}],
            "defs": {"A": {"type": "integer"}},
        }
        assert dereference(doc)["oneOf"] == [{"type": "integer"}, {"type": "null"}]

    def test_unresolvable_ref_becomes_empty_schema(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = dereference({"schema": {"$ref": "#/defs/Missing"}})
        assert result["schema"] == {}
        assert "Unresolvable $ref" in caplog.text

    def test_relative_file_ref(self, tmp_path):
        (tmp_path / "common.yaml").write_text(
            "components:\n"
            "  schemas:\n"
            "    Error:\n"
            "      type: object\n"
            "      properties:\n"
            "        message:\n"
            "          type: string\n"
        )
        doc = {"schema": {"$ref": "common.yaml#/components/schemas/Error"}}
        result = dereference(doc, tmp_path / "main.yaml")
        assert result["schema"]["properties"]["message"] == {"type": "string"}

    def test_missing_file_ref_is_logged(self, tmp_path, caplog):
        doc = {"schema": {"$ref": "nowhere.json#/Error"}}
        with caplog.at_level(logging.WARNING):
            result = dereference(doc, tmp_path / "main.yaml")
        assert result["schema"] == {}
        assert "nowhere.json" in caplog.text
