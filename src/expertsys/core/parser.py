"""
Parser da linguagem de base de conhecimento.

Reconhece as quatro formas estruturais do texto e produz uma
sequência de nós de parsing (ainda sem validação semântica).

Formato suportado (palavras-chave padrão):
    1 если погода-дождь и ветер-сильный то действие-плащ
    вопрос погода Какая сегодня погода?
    перевод действие Что взять с собой
    подсказка действие Проверьте прогноз погоды

As alternativas são tentadas na ordem fixa Regra, Pergunta,
Tradução, Dica. Quando nenhuma casa, o erro é reportado na posição
mais distante alcançada, com a lista de tokens esperados ali.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import DSLSyntaxError
from .models import DSLKeywords, NodeKind, ParseNode

logger = logging.getLogger(__name__)

_Match = Optional[Tuple[ParseNode, int]]


class KnowledgeParser:
    """
    Parser descendente recursivo com alternativas ordenadas.

    Uso:
        parser = KnowledgeParser()
        nodes = parser.parse(text)
    """

    PATTERNS = {
        "whitespace": re.compile(r"[ \t\r\n]*"),
        "blank": re.compile(r"[ \t]*"),
        "token": re.compile(r"\w+"),
        "number": re.compile(r"[0-9]+"),
        "text": re.compile(r"[\w\- ?()/]*"),
    }

    def __init__(self, keywords: Optional[DSLKeywords] = None):
        self.keywords = keywords or DSLKeywords()
        self._text = ""
        self._furthest = -1
        self._expected: List[str] = []

    def parse_file(self, file_path: Path | str, encoding: str = "utf-8") -> List[ParseNode]:
        """
        Parseia um arquivo de base de conhecimento.

        Raises:
            FileNotFoundError: Se arquivo não existe
            DSLSyntaxError: Se o texto não corresponde à gramática
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Arquivo não encontrado: {file_path}")

        nodes = self.parse(file_path.read_text(encoding=encoding))
        logger.info(f"Arquivo parseado: {file_path.name} ({len(nodes)} entradas)")
        return nodes

    def parse(self, text: str) -> List[ParseNode]:
        """
        Parseia o texto completo.

        Returns:
            Lista de nós na ordem em que aparecem

        Raises:
            DSLSyntaxError: Na primeira entrada que não casa com nenhuma forma
        """
        self._text = text
        nodes: List[ParseNode] = []
        pos = self._skip(0, "whitespace")

        # Pelo menos uma entrada é obrigatória
        while True:
            self._furthest = -1
            self._expected = []

            match = self._entry(pos)
            if match is None:
                raise self._error()

            node, pos = match
            nodes.append(node)
            pos = self._skip(pos, "whitespace")

            if pos >= len(text):
                break

        logger.debug(f"Parsing concluído: {len(nodes)} entradas")
        return nodes

    # ========================================
    # Produções
    # ========================================

    def _entry(self, pos: int) -> _Match:
        alternatives = (
            self._rule,
            lambda p: self._binding(p, NodeKind.ADVICE, self.keywords.question),
            lambda p: self._binding(p, NodeKind.TRANSLATION, self.keywords.translation),
            lambda p: self._binding(p, NodeKind.TIP, self.keywords.tip),
        )
        for alternative in alternatives:
            match = alternative(pos)
            if match is not None:
                return match
        return None

    def _rule(self, start: int) -> _Match:
        """number IF pairs THEN pair"""
        number = self._pattern(start, "number", "número da regra")
        if number is None:
            return None
        text, pos = number

        pos = self._keyword(self._skip(pos, "whitespace"), self.keywords.rule_if)
        if pos is None:
            return None

        conditions: List[Tuple[str, str]] = []
        pair = self._pair(self._skip(pos, "whitespace"))
        if pair is None:
            return None
        conditions.append(pair[0])
        pos = pair[1]

        while True:
            after_and = self._keyword(self._skip(pos, "whitespace"), self.keywords.rule_and)
            if after_and is None:
                break
            pair = self._pair(self._skip(after_and, "whitespace"))
            if pair is None:
                return None
            conditions.append(pair[0])
            pos = pair[1]

        pos = self._keyword(self._skip(pos, "whitespace"), self.keywords.rule_then)
        if pos is None:
            return None

        conclusion = self._pair(self._skip(pos, "whitespace"))
        if conclusion is None:
            return None

        line, column = self._location(start)
        node = ParseNode(
            kind=NodeKind.RULE,
            offset=start,
            line=line,
            column=column,
            number=text,
            conditions=tuple(conditions),
            conclusion=conclusion[0],
        )
        return node, conclusion[1]

    def _binding(self, start: int, kind: NodeKind, keyword: str) -> _Match:
        """KEYWORD category text"""
        pos = self._keyword(start, keyword)
        if pos is None:
            return None

        category = self._pattern(self._skip(pos, "whitespace"), "token", "categoria")
        if category is None:
            return None
        name, pos = category

        # O texto fica na mesma linha da categoria
        pos = self._skip(pos, "blank")
        match = self.PATTERNS["text"].match(self._text, pos)
        end = match.end()

        line, column = self._location(start)
        node = ParseNode(
            kind=kind,
            offset=start,
            line=line,
            column=column,
            category=name,
            text=match.group(0).strip(),
        )
        return node, end

    def _pair(self, pos: int) -> Optional[Tuple[Tuple[str, str], int]]:
        """category "-" value, sem espaços ao redor do hífen"""
        category = self._pattern(pos, "token", "categoria")
        if category is None:
            return None
        name, pos = category

        if not self._text.startswith("-", pos):
            self._fail(pos, "'-'")
            return None

        value = self._pattern(pos + 1, "token", "valor")
        if value is None:
            return None
        return (name, value[0]), value[1]

    # ========================================
    # Primitivas
    # ========================================

    def _skip(self, pos: int, name: str) -> int:
        return self.PATTERNS[name].match(self._text, pos).end()

    def _pattern(self, pos: int, name: str, description: str) -> Optional[Tuple[str, int]]:
        match = self.PATTERNS[name].match(self._text, pos)
        if match is None or match.end() == pos:
            self._fail(pos, description)
            return None
        return match.group(0), match.end()

    def _keyword(self, pos: int, word: str) -> Optional[int]:
        """Casa a palavra-chave inteira (não pode ser prefixo de outra palavra)."""
        end = pos + len(word)
        if self._text.startswith(word, pos):
            if end >= len(self._text) or not self.PATTERNS["token"].match(self._text, end):
                return end
        self._fail(pos, f"'{word}'")
        return None

    def _fail(self, pos: int, description: str) -> None:
        if pos > self._furthest:
            self._furthest = pos
            self._expected = [description]
        elif pos == self._furthest and description not in self._expected:
            self._expected.append(description)

    def _location(self, offset: int) -> Tuple[int, int]:
        """Converte offset em (linha, coluna), ambos a partir de 1."""
        line = self._text.count("\n", 0, offset) + 1
        column = offset - (self._text.rfind("\n", 0, offset) + 1) + 1
        return line, column

    def _error(self) -> DSLSyntaxError:
        offset = max(self._furthest, 0)
        line, column = self._location(offset)
        found = self._text[offset:offset + 20].split("\n", 1)[0]
        byte_offset = len(self._text[:offset].encode("utf-8"))
        return DSLSyntaxError(offset, line, column, self._expected, found, byte_offset)
