"""
Construtor da base de conhecimento.

Converte os nós de parsing em entradas tipadas, verifica a
consistência semântica e monta a KnowledgeBase imutável.

A construção é tudo-ou-nada: qualquer erro aborta a base inteira.
Avisos (categorias sem pergunta, traduções órfãs, etc.) não
impedem a construção e ficam disponíveis em `warnings`.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from .errors import IssueCode, ValidationError, ValidationIssue
from .knowledge_base import KnowledgeBase
from .models import (
    Binding,
    BindingKind,
    DSLKeywords,
    NodeKind,
    Pair,
    ParseNode,
    Rule,
    is_token,
)
from .parser import KnowledgeParser

logger = logging.getLogger(__name__)

_BINDING_KINDS = {
    NodeKind.ADVICE: BindingKind.ADVICE,
    NodeKind.TRANSLATION: BindingKind.TRANSLATION,
    NodeKind.TIP: BindingKind.TIP,
}


class KnowledgeBuilder:
    """
    Monta uma KnowledgeBase a partir de nós de parsing.

    Uso:
        builder = KnowledgeBuilder()
        base = builder.build(KnowledgeParser().parse(text))

        for warning in builder.warnings:
            print(warning)
    """

    def __init__(self):
        self._issues: List[ValidationIssue] = []
        self._warnings: List[str] = []

    def build(self, nodes: Iterable[ParseNode]) -> KnowledgeBase:
        """
        Constrói a base de conhecimento.

        Raises:
            ValidationError: Com todas as inconsistências encontradas
        """
        self._issues = []
        self._warnings = []

        rules: Dict[int, Rule] = {}
        # id -> linha da primeira declaração, mesmo de regras rejeitadas
        seen_ids: Dict[int, int] = {}
        bindings: Dict[BindingKind, Dict[str, Binding]] = {kind: {} for kind in BindingKind}

        for node in nodes:
            if node.kind == NodeKind.RULE:
                if node.number.isdigit():
                    rule_id = int(node.number)
                    if rule_id in seen_ids:
                        self._issue(
                            IssueCode.DUPLICATE_RULE_ID,
                            f"Regra {rule_id} duplicada (primeira na linha {seen_ids[rule_id]})",
                            node,
                            rule_id=rule_id,
                        )
                        continue
                    seen_ids[rule_id] = node.line
                rule = self._build_rule(node)
                if rule is not None:
                    rules[rule.id] = rule
            else:
                binding = self._build_binding(node)
                if binding is None:
                    continue
                existing = bindings[binding.kind]
                if binding.category in existing:
                    self._issue(
                        IssueCode.DUPLICATE_BINDING,
                        f"'{binding.kind.value}' duplicado para a categoria '{binding.category}'",
                        node,
                        category=binding.category,
                        kind=binding.kind.value,
                    )
                    continue
                existing[binding.category] = binding

        if self._issues:
            logger.error(f"Base de conhecimento inválida: {len(self._issues)} erro(s)")
            raise ValidationError(self._issues)

        base = KnowledgeBase(
            rules=rules.values(),
            advice=bindings[BindingKind.ADVICE].values(),
            translations=bindings[BindingKind.TRANSLATION].values(),
            tips=bindings[BindingKind.TIP].values(),
        )

        self._check_coverage(base)
        for warning in self._warnings:
            logger.warning(warning)

        logger.info(
            f"Base de conhecimento construída: {len(base.rules)} regras, "
            f"{len(base.advice)} perguntas"
        )
        return base

    def _build_rule(self, node: ParseNode) -> Optional[Rule]:
        tokens = [token for pair in node.conditions for token in pair]
        if node.conclusion is not None:
            tokens.extend(node.conclusion)
        if not node.number.isdigit() or node.conclusion is None or not node.conditions:
            self._issue(IssueCode.MALFORMED_TOKEN, "Regra malformada", node)
            return None
        if not self._check_tokens(tokens, node):
            return None

        rule_id = int(node.number)
        conditions: List[Pair] = []
        seen: Dict[str, str] = {}
        consistent = True

        for category, value in node.conditions:
            if category in seen:
                if seen[category] != value:
                    self._issue(
                        IssueCode.CONTRADICTORY_CONDITIONS,
                        f"Regra {rule_id} exige '{category}' igual a "
                        f"'{seen[category]}' e a '{value}'",
                        node,
                        rule_id=rule_id,
                        category=category,
                    )
                    consistent = False
                else:
                    self._warnings.append(
                        f"Linha {node.line}: condição '{category}-{value}' repetida na regra {rule_id}"
                    )
                continue
            seen[category] = value
            conditions.append(Pair(category, value))

        conclusion = Pair(*node.conclusion)
        if conclusion.category in seen:
            self._issue(
                IssueCode.SELF_REFERENCE,
                f"Regra {rule_id} conclui '{conclusion.category}', que também é sua condição",
                node,
                rule_id=rule_id,
                category=conclusion.category,
            )
            consistent = False

        if not consistent:
            return None
        return Rule(id=rule_id, conditions=tuple(conditions), conclusion=conclusion, line=node.line)

    def _build_binding(self, node: ParseNode) -> Optional[Binding]:
        if not self._check_tokens([node.category], node):
            return None
        return Binding(
            kind=_BINDING_KINDS[node.kind],
            category=node.category,
            text=node.text,
            line=node.line,
        )

    def _check_tokens(self, tokens: List[str], node: ParseNode) -> bool:
        bad = [token for token in tokens if not is_token(token)]
        for token in bad:
            self._issue(IssueCode.MALFORMED_TOKEN, f"Token inválido: {token!r}", node)
        return not bad

    def _check_coverage(self, base: KnowledgeBase) -> None:
        """Gera avisos sobre lacunas de cobertura da base."""
        used: Set[str] = set()
        for rule in base.rules:
            used.update(rule.condition_categories)

        for category in base.categories:
            if category in used and not base.rules_concluding(category) \
                    and base.question_for(category) is None:
                self._warnings.append(
                    f"Categoria '{category}' é usada em condições, mas nenhuma regra "
                    f"a conclui e não há pergunta para ela"
                )

        for binding in base.advice.values():
            if binding.category not in used:
                self._warnings.append(
                    f"Linha {binding.line}: pergunta para '{binding.category}', "
                    f"que não aparece em nenhuma condição"
                )

        known = set(base.categories)
        for binding in list(base.translations.values()) + list(base.tips.values()):
            if binding.category not in known:
                self._warnings.append(
                    f"Linha {binding.line}: '{binding.kind.value}' para categoria "
                    f"desconhecida '{binding.category}'"
                )

    def _issue(
        self,
        code: IssueCode,
        message: str,
        node: ParseNode,
        rule_id: Optional[int] = None,
        category: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> None:
        self._issues.append(ValidationIssue(
            code=code,
            message=message,
            line=node.line,
            rule_id=rule_id,
            category=category,
            kind=kind,
        ))

    @property
    def issues(self) -> List[ValidationIssue]:
        """Retorna os erros da última construção."""
        return self._issues.copy()

    @property
    def warnings(self) -> List[str]:
        """Retorna os avisos da última construção."""
        return self._warnings.copy()


def load_knowledge_base(
    text: str,
    keywords: Optional[DSLKeywords] = None,
) -> KnowledgeBase:
    """
    Parseia e constrói uma base de conhecimento a partir do texto.

    Raises:
        DSLSyntaxError: Texto fora da gramática
        ValidationError: Conhecimento inconsistente
    """
    nodes = KnowledgeParser(keywords).parse(text)
    return KnowledgeBuilder().build(nodes)
