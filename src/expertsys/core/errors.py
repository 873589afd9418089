"""
Exceções do núcleo do sistema especialista.

Hierarquia:
    KnowledgeError
    ├── DSLSyntaxError     - texto fora da gramática
    ├── ValidationError    - texto válido, conhecimento inconsistente
    └── SessionMisuseError - uso incorreto de uma sessão de consulta
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence


class KnowledgeError(Exception):
    """Erro base do núcleo."""


class DSLSyntaxError(KnowledgeError, ValueError):
    """
    Texto que não corresponde à gramática da base de conhecimento.

    offset é contado em caracteres do texto; byte_offset é a mesma
    posição em bytes UTF-8 (diferem em textos com cirílico).
    """

    def __init__(
        self,
        offset: int,
        line: int,
        column: int,
        expected: Sequence[str],
        found: str = "",
        byte_offset: Optional[int] = None,
    ):
        self.offset = offset
        self.byte_offset = offset if byte_offset is None else byte_offset
        self.line = line
        self.column = column
        self.expected = list(expected)
        self.found = found
        super().__init__(self._format())

    def _format(self) -> str:
        expected = ", ".join(self.expected) if self.expected else "fim do texto"
        found = repr(self.found) if self.found else "fim do texto"
        return (
            f"Erro de sintaxe na linha {self.line}, coluna {self.column}: "
            f"esperado {expected}, encontrado {found}"
        )


class IssueCode(Enum):
    """Códigos de inconsistência detectados na construção da base."""
    DUPLICATE_RULE_ID = "duplicate_rule_id"
    CONTRADICTORY_CONDITIONS = "contradictory_conditions"
    SELF_REFERENCE = "self_reference"
    DUPLICATE_BINDING = "duplicate_binding"
    MALFORMED_TOKEN = "malformed_token"


@dataclass(frozen=True)
class ValidationIssue:
    """Uma inconsistência semântica encontrada na base."""

    code: IssueCode
    message: str
    line: Optional[int] = None
    rule_id: Optional[int] = None
    category: Optional[str] = None
    kind: Optional[str] = None

    def __str__(self) -> str:
        if self.line:
            return f"Linha {self.line}: {self.message}"
        return self.message


class ValidationError(KnowledgeError, ValueError):
    """Base de conhecimento semanticamente inconsistente."""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        lines = "; ".join(str(issue) for issue in self.issues)
        super().__init__(f"{len(self.issues)} inconsistência(s) na base: {lines}")

    @property
    def codes(self) -> List[IssueCode]:
        return [issue.code for issue in self.issues]


class SessionMisuseError(KnowledgeError, RuntimeError):
    """Sessão usada fora do estado esperado ou com categoria errada."""
