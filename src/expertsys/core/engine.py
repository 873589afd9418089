"""
Motor de inferência - encadeamento para frente.

Responsável por:
- Disparar regras elegíveis em ordem crescente de id até o ponto fixo
- Suspender com uma pergunta quando falta o valor de uma categoria
- Retomar a partir da resposta fornecida pelo chamador

O motor nunca altera a KnowledgeBase: a memória de trabalho e o
conjunto de regras disparadas pertencem a uma única execução.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from .errors import SessionMisuseError
from .knowledge_base import KnowledgeBase
from .models import Exhausted, NeedsInput, Pair, Resolved, Rule, is_token

logger = logging.getLogger(__name__)

Outcome = Union[Resolved, NeedsInput, Exhausted]


class InferenceEngine:
    """
    Execução de uma consulta sobre uma base de conhecimento.

    Uso:
        engine = InferenceEngine(base, target="действие")
        outcome = engine.run()

        while isinstance(outcome, NeedsInput):
            outcome = engine.supply(outcome.category, ask_user(outcome.prompt))

    Com target=None o motor resolve a primeira categoria final
    (ver KnowledgeBase.goal_categories) que se tornar conhecida.

    Por padrão a próxima pergunta é a primeira categoria ausente da
    regra pendente de menor id. Com focused=True, regras irrelevantes
    para o alvo e regras já contrariadas (em categoria que nenhuma regra
    pendente pode concluir) não geram perguntas.
    """

    def __init__(
        self,
        base: KnowledgeBase,
        target: Optional[str] = None,
        initial_facts: Optional[Mapping[str, str]] = None,
        focused: bool = False,
    ):
        if target is not None and not is_token(target):
            raise ValueError(f"Categoria alvo inválida: {target!r}")

        facts = dict(initial_facts or {})
        for category, value in facts.items():
            if not is_token(category) or not is_token(value):
                raise ValueError(f"Fato inválido: {category!r}={value!r}")

        self.base = base
        self.target = target
        self._memory: Dict[str, str] = facts
        self._fired: List[int] = []
        self._fired_set = set()
        self._pending: Optional[str] = None
        self._outcome: Optional[Outcome] = None
        self.focused = focused
        self._relevant: Optional[FrozenSet[int]] = (
            base.relevant_rules(target) if focused and target is not None else None
        )

    @property
    def memory(self) -> Dict[str, str]:
        """Cópia da memória de trabalho."""
        return dict(self._memory)

    @property
    def fired(self) -> Tuple[int, ...]:
        """Ids das regras disparadas, na ordem de disparo."""
        return tuple(self._fired)

    @property
    def pending_category(self) -> Optional[str]:
        return self._pending

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    def run(self) -> Outcome:
        """
        Encadeia regras até concluir, precisar de uma resposta ou esgotar.

        Enquanto houver pergunta pendente, devolve a mesma NeedsInput.
        """
        if self._pending is not None and self._outcome is not None:
            return self._outcome

        while True:
            reached = self._reached()
            if reached is not None:
                logger.debug(f"Alvo resolvido: {reached} (regras {self._fired})")
                return self._finish(Resolved(pair=reached, fired=self.fired))

            rule = self._next_eligible()
            if rule is None:
                return self._finish(self._ask_or_exhaust())

            self._fire(rule)

    def supply(self, category: str, value: str) -> Outcome:
        """
        Fornece o valor da categoria pendente e retoma a inferência.

        Raises:
            SessionMisuseError: Sem pergunta pendente, categoria diferente
                da solicitada ou valor inválido
        """
        if self._pending is None:
            raise SessionMisuseError("Nenhuma pergunta pendente para responder")
        if category != self._pending:
            raise SessionMisuseError(
                f"Resposta para '{category}', mas a pergunta pendente é '{self._pending}'"
            )
        if not is_token(value):
            raise SessionMisuseError(f"Valor inválido para '{category}': {value!r}")

        self._memory[category] = value
        self._pending = None
        logger.debug(f"Resposta recebida: {category}-{value}")
        return self.run()

    # ========================================
    # Passos do algoritmo
    # ========================================

    def _reached(self) -> Optional[Pair]:
        if self.target is not None:
            if self.target in self._memory:
                return Pair(self.target, self._memory[self.target])
            return None

        for category in self.base.goal_categories:
            if category in self._memory:
                return Pair(category, self._memory[category])
        return None

    def _next_eligible(self) -> Optional[Rule]:
        for rule in self.base.rules:
            if rule.id not in self._fired_set and rule.is_satisfied_by(self._memory):
                return rule
        return None

    def _fire(self, rule: Rule) -> None:
        # Última regra disparada prevalece
        self._memory[rule.conclusion.category] = rule.conclusion.value
        self._fired.append(rule.id)
        self._fired_set.add(rule.id)
        logger.debug(f"Regra {rule.id} disparada: {rule.conclusion}")

    def _ask_or_exhaust(self) -> Outcome:
        category = self._next_missing()

        if category is None:
            logger.debug("Ponto fixo atingido sem resolver o alvo")
            return Exhausted(unanswered=None, fired=self.fired)

        if category not in self.base.advice:
            logger.debug(f"Categoria sem pergunta bloqueia a inferência: {category}")
            return Exhausted(unanswered=category, fired=self.fired)

        self._pending = category
        logger.debug(f"Pergunta necessária: {category}")

        return NeedsInput(
            category=category,
            prompt=self.base.question_for(category) or self.base.label_for(category),
            choices=self.base.values_for(category),
        )

    def _next_missing(self) -> Optional[str]:
        """Primeira categoria ausente da regra pendente de menor id."""
        pending_rules = [rule for rule in self.base.rules if rule.id not in self._fired_set]
        derivable = {rule.conclusion.category for rule in pending_rules}

        for rule in pending_rules:
            if self.focused:
                if self._relevant is not None and rule.id not in self._relevant:
                    continue
                # Condição contrariada que nenhuma regra pendente pode mudar
                if any(c not in derivable for c in rule.contradicted_by(self._memory)):
                    continue
            missing = rule.missing_in(self._memory)
            if missing:
                return missing[0]
        return None

    def _finish(self, outcome: Outcome) -> Outcome:
        self._outcome = outcome
        return outcome


def resolve(
    base: KnowledgeBase,
    target: Optional[str] = None,
    initial_facts: Optional[Mapping[str, str]] = None,
    focused: bool = False,
) -> Outcome:
    """Executa uma consulta até a primeira suspensão ou conclusão."""
    return InferenceEngine(base, target, initial_facts, focused).run()
