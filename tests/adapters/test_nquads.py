"""Tests for N-Quad fact rendering and literal escaping.

Security Impact:
    - Verifies that caller text can never terminate a literal or add facts
    - Verifies that subjects and predicates outside the allowed patterns are rejected
"""

import pytest

from carepath.adapters.graph.nquads import Fact, FactSet, escape_literal
from tests.fakes import parse_nquads


class TestEscapeLiteral:
    """Test literal escaping."""

    def test_plain_text_unchanged(self):
        assert escape_literal("heart failure") == "heart failure"

    def test_quotes_and_backslashes(self):
        assert escape_literal('say "hi" \\ bye') == 'say \\"hi\\" \\\\ bye'

    def test_line_breaks_and_tabs(self):
        assert escape_literal("a\nb\rc\td") == "a\\nb\\rc\\td"

    def test_other_control_characters_use_unicode_escape(self):
        assert escape_literal("a\x00b\x1fc\x7f") == "a\\u0000b\\u001Fc\\u007F"

    def test_non_ascii_kept(self):
        assert escape_literal("Müller ßé 漢字") == "Müller ßé 漢字"

    def test_non_string_values_are_stringified(self):
        assert escape_literal(42) == "42"


class TestFact:
    """Test single fact rendering."""

    def test_string_literal(self):
        fact = Fact("uid(p)", "condition", value="copd")
        assert fact.render() == 'uid(p) <condition> "copd" .'

    def test_typed_literal(self):
        fact = Fact("uid(p)", "age", value="42", datatype="xs:int")
        assert fact.render() == 'uid(p) <age> "42"^^<xs:int> .'

    def test_edge(self):
        fact = Fact("uid(p)", "admissions", target="_:admission")
        assert fact.render() == "uid(p) <admissions> _:admission ."

    def test_uid_subject(self):
        assert Fact("<0x1a>", "name", value="x").render() == '<0x1a> <name> "x" .'

    def test_dotted_predicate(self):
        assert Fact("_:n", "dgraph.type", value="Patient").render() == '_:n <dgraph.type> "Patient" .'

    @pytest.mark.parametrize("subject", ["p", "uid(p) .", "<name>", "_:", "uid()", '"x"'])
    def test_rejects_invalid_subject(self, subject):
        with pytest.raises(ValueError):
            Fact(subject, "name", value="x").render()

    @pytest.mark.parametrize("predicate", ["", "na me", "name>", "1name", "a<b"])
    def test_rejects_invalid_predicate(self, predicate):
        with pytest.raises(ValueError):
            Fact("uid(p)", predicate, value="x").render()

    def test_rejects_unknown_datatype(self):
        with pytest.raises(ValueError):
            Fact("uid(p)", "age", value="1", datatype="xs:anything").render()

    def test_rejects_invalid_edge_target(self):
        with pytest.raises(ValueError):
            Fact("uid(p)", "admissions", target="* .").render()


class TestFactSet:
    """Test fact set construction."""

    def test_chaining_and_length(self):
        facts = (
            FactSet()
            .string("uid(p)", "name", "P-1")
            .integer("uid(p)", "age", 42)
            .edge("uid(p)", "medications", "_:medication")
        )

        assert len(facts) == 3
        assert facts.to_nquads().splitlines() == [
            'uid(p) <name> "P-1" .',
            'uid(p) <age> "42"^^<xs:int> .',
            "uid(p) <medications> _:medication .",
        ]

    def test_empty_set_renders_nothing(self):
        assert FactSet().to_nquads() == ""

    @pytest.mark.parametrize("value", [
        'a" ) { x }',
        'x" .\nuid(p) <age> "0"^^<xs:int> .',
        "\\\"",
        "trailing backslash \\",
        "}\n{ delete { * * * . } }",
    ])
    def test_hostile_values_stay_single_literal(self, value):
        nquads = FactSet().string("uid(p)", "name", value).to_nquads()

        assert len(nquads.splitlines()) == 1
        facts = parse_nquads(nquads)
        assert facts == [("uid(p)", "name", value, False)]
