"""
Modelos de dados do núcleo do sistema especialista.

Define as estruturas usadas para representar o conhecimento
parseado (regras, perguntas, traduções, dicas) e os resultados
da inferência.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

# Token de categoria/valor: letras (Unicode), dígitos e sublinhado
TOKEN_PATTERN = re.compile(r"\w+")


def is_token(text: str) -> bool:
    """Verifica se o texto é um token válido de categoria ou valor."""
    return isinstance(text, str) and TOKEN_PATTERN.fullmatch(text) is not None


@dataclass(frozen=True)
class DSLKeywords:
    """
    Palavras-chave da linguagem da base de conhecimento.

    Exemplo com as palavras padrão:
        1 если погода-дождь и ветер-сильный то действие-плащ
        вопрос погода Какая сегодня погода?
        перевод действие Что взять с собой
        подсказка действие Проверьте прогноз
    """
    rule_if: str = "если"
    rule_then: str = "то"
    rule_and: str = "и"
    question: str = "вопрос"
    translation: str = "перевод"
    tip: str = "подсказка"

    def __post_init__(self) -> None:
        words = self.as_dict()
        for name, word in words.items():
            if not is_token(word):
                raise ValueError(f"Palavra-chave inválida para '{name}': {word!r}")
        if len(set(words.values())) != len(words):
            raise ValueError("Palavras-chave da DSL devem ser distintas")

    def as_dict(self) -> Dict[str, str]:
        return {
            "rule_if": self.rule_if,
            "rule_then": self.rule_then,
            "rule_and": self.rule_and,
            "question": self.question,
            "translation": self.translation,
            "tip": self.tip,
        }


@dataclass(frozen=True)
class Pair:
    """
    Par categoria-valor.

    Representa um fato ("погода é дождь") ou a conclusão de uma regra.
    """
    category: str
    value: str

    def to_dsl(self) -> str:
        return f"{self.category}-{self.value}"

    def __str__(self) -> str:
        return self.to_dsl()


@dataclass(frozen=True)
class Rule:
    """
    Regra numerada: um conjunto de condições implica uma conclusão.

    Exemplo:
        1 если погода-дождь то действие-зонт
    """
    id: int
    conditions: Tuple[Pair, ...]
    conclusion: Pair
    line: Optional[int] = field(default=None, compare=False)

    @property
    def condition_categories(self) -> Tuple[str, ...]:
        return tuple(pair.category for pair in self.conditions)

    def is_satisfied_by(self, memory: Dict[str, str]) -> bool:
        """Verifica se todas as condições estão presentes na memória."""
        return all(memory.get(pair.category) == pair.value for pair in self.conditions)

    def missing_in(self, memory: Dict[str, str]) -> List[str]:
        """Categorias das condições ainda ausentes na memória, na ordem declarada."""
        return [pair.category for pair in self.conditions if pair.category not in memory]

    def contradicted_by(self, memory: Dict[str, str]) -> List[str]:
        """Categorias conhecidas cujo valor difere do exigido pela regra."""
        return [
            pair.category
            for pair in self.conditions
            if pair.category in memory and memory[pair.category] != pair.value
        ]

    def to_dsl(self, keywords: Optional[DSLKeywords] = None) -> str:
        kw = keywords or DSLKeywords()
        conditions = f" {kw.rule_and} ".join(pair.to_dsl() for pair in self.conditions)
        return f"{self.id} {kw.rule_if} {conditions} {kw.rule_then} {self.conclusion.to_dsl()}"


class BindingKind(Enum):
    """Tipos de associação textual a uma categoria."""
    ADVICE = "advice"
    TRANSLATION = "translation"
    TIP = "tip"

    def keyword(self, keywords: DSLKeywords) -> str:
        if self is BindingKind.ADVICE:
            return keywords.question
        if self is BindingKind.TRANSLATION:
            return keywords.translation
        return keywords.tip


@dataclass(frozen=True)
class Binding:
    """
    Texto livre associado a uma categoria.

    - ADVICE: pergunta feita quando o valor da categoria é desconhecido
    - TRANSLATION: rótulo legível da categoria
    - TIP: dica exibida junto com perguntas e conclusões
    """
    kind: BindingKind
    category: str
    text: str
    line: Optional[int] = field(default=None, compare=False)

    def to_dsl(self, keywords: Optional[DSLKeywords] = None) -> str:
        kw = keywords or DSLKeywords()
        head = f"{self.kind.keyword(kw)} {self.category}"
        return f"{head} {self.text}" if self.text else head


class NodeKind(Enum):
    """Formas estruturais reconhecidas pela gramática (na ordem de tentativa)."""
    RULE = "rule"
    ADVICE = "advice"
    TRANSLATION = "translation"
    TIP = "tip"


@dataclass(frozen=True)
class ParseNode:
    """
    Nó de parsing ainda sem validação semântica.

    Para RULE usa number/conditions/conclusion; para os demais
    tipos usa category/text.
    """
    kind: NodeKind
    offset: int
    line: int
    column: int
    number: str = ""
    conditions: Tuple[Tuple[str, str], ...] = ()
    conclusion: Optional[Tuple[str, str]] = None
    category: str = ""
    text: str = ""


# ========================================
# Resultados da inferência
# ========================================

@dataclass(frozen=True)
class Resolved:
    """Conclusão encontrada para a categoria alvo."""
    pair: Pair
    fired: Tuple[int, ...] = ()

    @property
    def is_final(self) -> bool:
        return True


@dataclass(frozen=True)
class NeedsInput:
    """
    O motor está suspenso aguardando o valor de uma categoria.

    choices lista os valores mencionados nas regras para a categoria.
    """
    category: str
    prompt: str
    choices: Tuple[str, ...] = ()

    @property
    def is_final(self) -> bool:
        return False


@dataclass(frozen=True)
class Exhausted:
    """
    Nenhuma regra pode disparar e não há pergunta a fazer.

    unanswered indica a categoria que bloqueou a inferência por não
    ter pergunta associada (None quando o ponto fixo foi atingido).
    """
    unanswered: Optional[str] = None
    fired: Tuple[int, ...] = ()

    @property
    def is_final(self) -> bool:
        return True
