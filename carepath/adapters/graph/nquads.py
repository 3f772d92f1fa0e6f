"""N-Quad fact construction with literal escaping.

Every caller-supplied value that ends up in a mutation passes through
``escape_literal`` and is emitted as a quoted RDF string literal. Subjects and
predicates come only from code constants and are checked against a strict
pattern, so no caller text can reach a syntactic position of a fact.

Security Impact:
    - Quotes, backslashes and control characters are escaped per the N-Quads grammar
    - A value such as ``a" ) { x }`` stays one opaque literal
    - Predicates and subjects that are not code-defined are rejected
"""

import re
from dataclasses import dataclass, field
from typing import Optional

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

_PREDICATE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_SUBJECT_PATTERN = re.compile(r"^(_:[A-Za-z][A-Za-z0-9_]*|uid\([A-Za-z][A-Za-z0-9_]*\)|<0x[0-9a-f]+>)$")
_DATATYPES = {"xs:int", "xs:float", "xs:boolean", "xs:dateTime", "xs:string"}


def escape_literal(value: str) -> str:
    """Escape a value for use inside a double-quoted N-Quad literal.

    Parameters:
        value: Raw text (converted with ``str`` if not already a string)

    Returns:
        Escaped text, without the surrounding quotes
    """
    escaped = []
    for ch in str(value):
        if ch in _ESCAPES:
            escaped.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            escaped.append(f"\\u{ord(ch):04X}")
        else:
            escaped.append(ch)
    return "".join(escaped)


def _check_subject(subject: str) -> str:
    if not _SUBJECT_PATTERN.match(subject):
        raise ValueError(f"Invalid fact subject: {subject!r}")
    return subject


def _check_predicate(predicate: str) -> str:
    if not _PREDICATE_PATTERN.match(predicate):
        raise ValueError(f"Invalid fact predicate: {predicate!r}")
    return predicate


@dataclass(frozen=True)
class Fact:
    """A single subject-predicate-object statement.

    Attributes:
        subject: Blank node (``_:name``), upsert variable (``uid(var)``) or uid (``<0x1>``)
        predicate: Predicate name defined in code
        value: Literal value (escaped on rendering); ignored when ``target`` is set
        datatype: Optional XSD datatype for typed literals
        target: Object node reference for edge facts
    """

    subject: str
    predicate: str
    value: Optional[str] = None
    datatype: Optional[str] = None
    target: Optional[str] = None

    def render(self) -> str:
        subject = _check_subject(self.subject)
        predicate = _check_predicate(self.predicate)

        if self.target is not None:
            obj = _check_subject(self.target)
        else:
            obj = f'"{escape_literal(self.value if self.value is not None else "")}"'
            if self.datatype:
                if self.datatype not in _DATATYPES:
                    raise ValueError(f"Unsupported literal datatype: {self.datatype!r}")
                obj += f"^^<{self.datatype}>"

        return f"{subject} <{predicate}> {obj} ."


@dataclass
class FactSet:
    """An ordered collection of facts committed together in one mutation."""

    facts: list[Fact] = field(default_factory=list)

    def string(self, subject: str, predicate: str, value: str) -> "FactSet":
        self.facts.append(Fact(subject, predicate, value=value))
        return self

    def integer(self, subject: str, predicate: str, value: int) -> "FactSet":
        self.facts.append(Fact(subject, predicate, value=str(int(value)), datatype="xs:int"))
        return self

    def edge(self, subject: str, predicate: str, target: str) -> "FactSet":
        self.facts.append(Fact(subject, predicate, target=target))
        return self

    def __len__(self) -> int:
        return len(self.facts)

    def to_nquads(self) -> str:
        """Render all facts, one N-Quad per line."""
        return "\n".join(fact.render() for fact in self.facts)
