"""
Tests for sensitive-field redaction
"""

from collections import namedtuple
from dataclasses import dataclass

from logshield import TOO_DEEP, MaskResult, Redactor, mask_value, redact


class TestMaskValue:
    def test_short_values_fully_masked(self):
        assert mask_value("abc").result == "***"
        assert mask_value("a").result == "*"
        assert mask_value("").result == "*"

    def test_four_characters(self):
        assert mask_value("abcd") == MaskResult("a**d", "a", "d")

    def test_long_values_keep_two_each_side(self):
        assert mask_value("secret123") == MaskResult("se*****23", "se", "23")
        assert mask_value("12345").result == "12*45"

    def test_length_preserved(self):
        for length in range(1, 20):
            assert len(mask_value("x" * length).result) == length


class TestRedactor:
    def setup_method(self):
        self.redactor = Redactor({"password", "token"})

    def test_masks_sensitive_keys(self):
        result = self.redactor.redact({"user": "alice", "password": "hunter22"})
        assert result == {"user": "alice", "password": "hu****22"}

    def test_does_not_mutate_input(self):
        payload = {"password": "hunter22", "nested": {"token": "abcdef"}}
        self.redactor.redact(payload)
        assert payload == {"password": "hunter22", "nested": {"token": "abcdef"}}

    def test_non_string_scalars_stringified(self):
        result = self.redactor.redact({"password": 123456, "token": True})
        assert result == {"password": "12**56", "token": "T**e"}

    def test_bytes_decoded_then_masked(self):
        assert self.redactor.redact({"token": b"abcdefgh"}) == {"token": "ab****gh"}

    def test_none_stays_none(self):
        assert self.redactor.redact({"password": None}) == {"password": None}

    def test_scalars_pass_through(self):
        assert self.redactor.redact("password") == "password"
        assert self.redactor.redact(42) == 42

    def test_nested_structures(self):
        payload = {"users": [{"name": "bob", "password": "swordfish"}], "count": 1}
        result = self.redactor.redact(payload)
        assert result == {"users": [{"name": "bob", "password": "sw*****sh"}], "count": 1}

    def test_sensitive_key_with_container_value_recurses(self):
        payload = {"password": {"token": "abcdef", "hint": "pet"}}
        assert self.redactor.redact(payload) == {"password": {"token": "ab**ef", "hint": "pet"}}

    def test_only_string_keys_match(self):
        redactor = Redactor({"1"})
        assert redactor.redact({1: "secret"}) == {1: "secret"}

    def test_tuples_keep_type(self):
        Point = namedtuple("Point", ["x", "y"])
        result = self.redactor.redact(({"token": "abcdef"}, Point(1, 2)))
        assert isinstance(result, tuple)
        assert result[0] == {"token": "ab**ef"}
        assert isinstance(result[1], Point)
        assert result[1] == Point(1, 2)

    def test_dataclass_becomes_dict(self):
        @dataclass
        class Credentials:
            user: str
            password: str

        result = self.redactor.redact(Credentials("alice", "hunter22"))
        assert result == {"user": "alice", "password": "hu****22"}

    def test_self_referential_dict_terminates(self):
        payload = {"password": "hunter22"}
        payload["self"] = payload
        result = self.redactor.redact(payload)
        assert result["password"] == "hu****22"
        assert result["self"] is result

    def test_cyclic_list(self):
        items = ["a"]
        items.append(items)
        result = self.redactor.redact(items)
        assert result[0] == "a"
        assert result[1] is result

    def test_shared_references_resolve_to_same_output(self):
        shared = {"token": "abcdef"}
        result = self.redactor.redact({"a": shared, "b": shared})
        assert result["a"] is result["b"]
        assert result["a"] == {"token": "ab**ef"}

    def test_max_depth(self):
        redactor = Redactor(max_depth=2)
        payload = {"l1": {"l2": {"l3": {"l4": 1}}}}
        assert redactor.redact(payload) == {"l1": {"l2": {"l3": TOO_DEEP}}}

    def test_no_depth_limit_by_default(self):
        payload = value = {}
        for _ in range(50):
            value["next"] = {}
            value = value["next"]
        result = Redactor().redact(payload)
        for _ in range(50):
            result = result["next"]
        assert result == {}

    def test_fields_held_by_reference(self):
        fields = set()
        redactor = Redactor(fields)
        assert redactor.redact({"pin": "1234"}) == {"pin": "1234"}
        fields.add("pin")
        assert redactor.redact({"pin": "1234"}) == {"pin": "1**4"}

    def test_per_call_fields_override(self):
        assert self.redactor.redact({"password": "abcd"}, {"other"}) == {"password": "abcd"}


class TestRedactFunction:
    def test_module_level_redact(self):
        assert redact({"apiKey": "abcdefgh"}, ["apiKey"]) == {"apiKey": "ab****gh"}

    def test_module_level_max_depth(self):
        assert redact([[["deep"]]], [], max_depth=1) == [[TOO_DEEP]]
