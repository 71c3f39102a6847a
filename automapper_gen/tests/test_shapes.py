"""
Tests for type shape classification and name utilities.
"""

from automapper_gen.pipeline.analyzer.shapes import base_type, classify, types_compatible
from automapper_gen.pipeline.schema.nodes import ShapeKind
from automapper_gen.utils import qualifier, snake_to_camel, unqualified_name


class TestClassify:
    def test_scalar(self):
        shape = classify("int64")
        assert shape.kind == ShapeKind.SCALAR
        assert shape.base_type_name == "int64"
        assert not shape.is_pointer
        assert not shape.is_sequence

    def test_pointer(self):
        shape = classify("*Address")
        assert shape.kind == ShapeKind.POINTER
        assert shape.base_type_name == "Address"
        assert shape.is_pointer

    def test_sequence_of_values(self):
        shape = classify("[]Address")
        assert shape.is_sequence
        assert shape.base_type_name == "Address"
        assert not shape.element_is_pointer

    def test_sequence_of_pointers(self):
        shape = classify("[]*db.Address")
        assert shape.is_sequence
        assert shape.element_is_pointer
        assert shape.base_type_name == "db.Address"
        assert str(shape) == "[]*db.Address"

    def test_unrecognized_text_is_opaque_scalar(self):
        for text in ["map[string]int", "[4]byte", "chan int", "func() error"]:
            shape = classify(text)
            assert shape.kind == ShapeKind.SCALAR, text
            assert shape.base_type_name == text

    def test_surrounding_whitespace_is_ignored(self):
        assert classify("  time.Time ").text == "time.Time"

    def test_base_type_strips_every_wrapper(self):
        assert base_type("*[]*int") == "int"
        assert base_type("string") == "string"


class TestTypesCompatible:
    def test_equal_names(self):
        assert types_compatible("int64", "int64")
        assert not types_compatible("int", "int64")

    def test_wrappers_do_not_matter(self):
        assert types_compatible("*Address", "[]Address")

    def test_qualified_matches_unqualified(self):
        assert types_compatible("db.Role", "Role")
        assert types_compatible("Role", "db.Role")

    def test_different_qualifiers_do_not_match(self):
        assert not types_compatible("db.Role", "api.Role")


class TestNameUtilities:
    def test_snake_to_camel(self):
        assert snake_to_camel("user_name") == "UserName"
        assert snake_to_camel("created_at") == "CreatedAt"
        assert snake_to_camel("id") == "Id"
        assert snake_to_camel("http_status_code") == "HttpStatusCode"
        assert snake_to_camel("UserName") == "UserName"

    def test_unqualified_name(self):
        assert unqualified_name("db.UserDB") == "UserDB"
        assert unqualified_name("User") == "User"

    def test_qualifier(self):
        assert qualifier("db.UserDB") == "db"
        assert qualifier("User") == ""
