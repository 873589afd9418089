"""
Base de conhecimento imutável.

Agrega regras, perguntas, traduções e dicas de um domínio e mantém
índices por categoria para consulta rápida durante a inferência.
Depois de construída nunca é alterada, podendo ser compartilhada
por qualquer número de sessões simultâneas.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .models import Binding, DSLKeywords, Rule


class KnowledgeBase:
    """
    Conjunto imutável de conhecimento de um domínio.

    Uso:
        base = load_knowledge_base(text)
        base.rules_concluding("действие")
        base.translation_for("действие")
    """

    __slots__ = (
        "_rules",
        "_by_id",
        "_advice",
        "_translations",
        "_tips",
        "_conditioned_on",
        "_concluding",
        "_values",
    )

    def __init__(
        self,
        rules: Iterable[Rule] = (),
        advice: Iterable[Binding] = (),
        translations: Iterable[Binding] = (),
        tips: Iterable[Binding] = (),
    ):
        self._rules: Tuple[Rule, ...] = tuple(sorted(rules, key=lambda rule: rule.id))
        self._by_id = MappingProxyType({rule.id: rule for rule in self._rules})
        self._advice = MappingProxyType({b.category: b for b in advice})
        self._translations = MappingProxyType({b.category: b for b in translations})
        self._tips = MappingProxyType({b.category: b for b in tips})

        conditioned: Dict[str, List[Rule]] = {}
        concluding: Dict[str, List[Rule]] = {}
        values: Dict[str, List[str]] = {}

        for rule in self._rules:
            for pair in rule.conditions + (rule.conclusion,):
                known = values.setdefault(pair.category, [])
                if pair.value not in known:
                    known.append(pair.value)
            for category in rule.condition_categories:
                conditioned.setdefault(category, []).append(rule)
            concluding.setdefault(rule.conclusion.category, []).append(rule)

        self._conditioned_on = MappingProxyType({k: tuple(v) for k, v in conditioned.items()})
        self._concluding = MappingProxyType({k: tuple(v) for k, v in concluding.items()})
        self._values = MappingProxyType({k: tuple(v) for k, v in values.items()})

    # ========================================
    # Regras
    # ========================================

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Regras em ordem crescente de id."""
        return self._rules

    def rule(self, rule_id: int) -> Optional[Rule]:
        return self._by_id.get(rule_id)

    def rules_conditioned_on(self, category: str) -> Tuple[Rule, ...]:
        """Regras que usam a categoria em alguma condição."""
        return self._conditioned_on.get(category, ())

    def rules_concluding(self, category: str) -> Tuple[Rule, ...]:
        """Regras cuja conclusão é a categoria."""
        return self._concluding.get(category, ())

    def relevant_rules(self, target: str) -> FrozenSet[int]:
        """
        Ids das regras que podem contribuir para concluir o alvo.

        Inclui as regras que concluem o alvo e, transitivamente, as que
        concluem categorias exigidas pelas condições dessas regras.
        """
        relevant = set()
        pending = [target]
        visited = set()

        while pending:
            category = pending.pop()
            if category in visited:
                continue
            visited.add(category)
            for rule in self.rules_concluding(category):
                relevant.add(rule.id)
                pending.extend(rule.condition_categories)

        return frozenset(relevant)

    # ========================================
    # Categorias
    # ========================================

    @property
    def categories(self) -> Tuple[str, ...]:
        """Categorias mencionadas nas regras, na ordem em que aparecem."""
        return tuple(self._values.keys())

    def values_for(self, category: str) -> Tuple[str, ...]:
        """Valores mencionados nas regras para a categoria."""
        return self._values.get(category, ())

    @property
    def conclusion_categories(self) -> Tuple[str, ...]:
        return tuple(self._concluding.keys())

    @property
    def goal_categories(self) -> Tuple[str, ...]:
        """
        Categorias finais: concluídas por alguma regra e nunca usadas
        como condição. Sem nenhuma, todas as categorias concluídas.
        """
        goals = tuple(c for c in self._concluding if c not in self._conditioned_on)
        return goals or self.conclusion_categories

    # ========================================
    # Textos associados
    # ========================================

    @property
    def advice(self) -> Mapping[str, Binding]:
        return self._advice

    @property
    def translations(self) -> Mapping[str, Binding]:
        return self._translations

    @property
    def tips(self) -> Mapping[str, Binding]:
        return self._tips

    def question_for(self, category: str) -> Optional[str]:
        binding = self._advice.get(category)
        return binding.text if binding else None

    def translation_for(self, category: str) -> Optional[str]:
        binding = self._translations.get(category)
        return binding.text if binding else None

    def tip_for(self, category: str) -> Optional[str]:
        binding = self._tips.get(category)
        return binding.text if binding else None

    def label_for(self, category: str) -> str:
        """Rótulo legível da categoria (tradução ou o próprio nome)."""
        return self.translation_for(category) or category

    # ========================================
    # Serialização
    # ========================================

    def to_text(self, keywords: Optional[DSLKeywords] = None) -> str:
        """Serializa a base de volta para a linguagem de origem."""
        lines = [rule.to_dsl(keywords) for rule in self._rules]
        for group in (self._advice, self._translations, self._tips):
            lines.extend(binding.to_dsl(keywords) for binding in group.values())
        return "\n".join(lines) + "\n"

    def summary(self) -> Dict[str, Any]:
        """Resumo com contagens (para logs e exibição)."""
        return {
            "rules": len(self._rules),
            "categories": len(self._values),
            "questions": len(self._advice),
            "translations": len(self._translations),
            "tips": len(self._tips),
            "goals": list(self.goal_categories),
        }

    def _key(self) -> Tuple[Any, ...]:
        return (
            self._rules,
            dict(self._advice),
            dict(self._translations),
            dict(self._tips),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KnowledgeBase):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"KnowledgeBase(rules={len(self._rules)}, questions={len(self._advice)}, "
            f"translations={len(self._translations)}, tips={len(self._tips)})"
        )
