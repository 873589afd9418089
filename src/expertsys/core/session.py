"""
Sessão de consulta.

Liga uma execução do motor de inferência a uma troca interativa
de perguntas e respostas, guardando o histórico para explicação.
A sessão pertence ao chamador (interface), nunca à base.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .engine import InferenceEngine, Outcome
from .errors import SessionMisuseError
from .knowledge_base import KnowledgeBase
from .models import Exhausted, NeedsInput, Resolved

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Estado de uma sessão de consulta."""
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass
class SessionTurn:
    """Uma pergunta feita pelo motor e a resposta recebida."""

    category: str
    question: str
    answer: Optional[str] = None
    asked_at: datetime = field(default_factory=datetime.now)
    answered_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "question": self.question,
            "answer": self.answer,
            "asked_at": self.asked_at.isoformat(),
            "answered_at": self.answered_at.isoformat() if self.answered_at else None,
        }


class QuerySession:
    """
    Gerencia uma consulta interativa sobre uma base de conhecimento.

    Uso:
        session = QuerySession(base)
        outcome = session.start("действие")

        while isinstance(outcome, NeedsInput):
            outcome = session.answer(outcome.category, input(outcome.prompt))

        print(session.explain())
    """

    def __init__(self, base: KnowledgeBase, focused: bool = False):
        self.base = base
        self.focused = focused
        self.target: Optional[str] = None
        self._engine: Optional[InferenceEngine] = None
        self._outcome: Optional[Outcome] = None
        self._state = SessionState.IDLE
        self._turns: List[SessionTurn] = []
        self._started_at: Optional[datetime] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def transcript(self) -> List[SessionTurn]:
        return list(self._turns)

    @property
    def facts(self) -> Dict[str, str]:
        """Cópia da memória de trabalho (vazia sem execução ativa)."""
        return self._engine.memory if self._engine else {}

    @property
    def fired_rules(self) -> Tuple[int, ...]:
        return self._engine.fired if self._engine else ()

    def start(
        self,
        target: Optional[str] = None,
        facts: Optional[Mapping[str, str]] = None,
    ) -> Outcome:
        """
        Inicia a consulta. Uma execução anterior é descartada.

        Args:
            target: Categoria a resolver (None = melhor conclusão)
            facts: Fatos iniciais conhecidos

        Raises:
            SessionMisuseError: Alvo ou fatos malformados
        """
        self._reset()
        try:
            self._engine = InferenceEngine(self.base, target, facts, self.focused)
        except ValueError as e:
            raise SessionMisuseError(str(e)) from e

        self.target = target
        self._started_at = datetime.now()
        logger.info(f"Sessão iniciada: alvo={target or '<melhor conclusão>'}")

        return self._update(self._engine.run())

    def answer(self, category: str, value: str) -> Outcome:
        """
        Responde a pergunta pendente.

        Raises:
            SessionMisuseError: Sessão não aguarda resposta, categoria
                diferente da solicitada ou valor malformado
        """
        if self._state != SessionState.AWAITING_INPUT or self._engine is None:
            raise SessionMisuseError(
                f"Sessão não aguarda resposta (estado: {self._state.value})"
            )

        outcome = self._engine.supply(category, value)

        turn = self._turns[-1]
        turn.answer = value
        turn.answered_at = datetime.now()

        return self._update(outcome)

    def cancel(self) -> None:
        """Descarta imediatamente a memória de trabalho e as regras disparadas."""
        self._engine = None
        self._outcome = None
        self._state = SessionState.CANCELLED
        logger.info("Sessão cancelada")

    def _reset(self) -> None:
        self._engine = None
        self._outcome = None
        self._turns = []
        self.target = None
        self._state = SessionState.IDLE

    def _update(self, outcome: Outcome) -> Outcome:
        self._outcome = outcome

        if isinstance(outcome, NeedsInput):
            self._state = SessionState.AWAITING_INPUT
            self._turns.append(SessionTurn(category=outcome.category, question=outcome.prompt))
        elif isinstance(outcome, Resolved):
            self._state = SessionState.RESOLVED
            logger.info(f"Sessão concluída: {outcome.pair}")
        else:
            self._state = SessionState.EXHAUSTED
            if outcome.unanswered:
                logger.info(f"Sessão esgotada: sem pergunta para '{outcome.unanswered}'")
            else:
                logger.info("Sessão esgotada: ponto fixo sem conclusão")

        return outcome

    # ========================================
    # Explicação
    # ========================================

    def explain(self) -> str:
        """Texto legível com a conclusão e como se chegou a ela."""
        lines: List[str] = []
        outcome = self._outcome

        if isinstance(outcome, Resolved):
            category = outcome.pair.category
            lines.append(f"{self.base.label_for(category)}: {outcome.pair.value}")
            tip = self.base.tip_for(category)
            if tip:
                lines.append(f"Dica: {tip}")
        elif isinstance(outcome, NeedsInput):
            lines.append(f"Aguardando resposta: {outcome.prompt}")
        elif isinstance(outcome, Exhausted):
            if outcome.unanswered:
                label = self.base.label_for(outcome.unanswered)
                lines.append(f"Sem conclusão: não há pergunta para '{label}'")
            else:
                lines.append("Sem conclusão: nenhuma regra se aplica")
        elif self._state == SessionState.CANCELLED:
            lines.append("Sessão cancelada")
        else:
            lines.append("Sessão não iniciada")

        answered = [turn for turn in self._turns if turn.answer is not None]
        if answered:
            lines.append("Respostas:")
            for turn in answered:
                lines.append(f"  • {turn.question} -> {turn.answer}")

        if self.fired_rules:
            lines.append("Regras aplicadas:")
            for rule_id in self.fired_rules:
                rule = self.base.rule(rule_id)
                lines.append(f"  • {rule.to_dsl()}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serializa o estado da sessão (para logs/JSON)."""
        outcome = self._outcome
        conclusion = None
        if isinstance(outcome, Resolved):
            conclusion = {"category": outcome.pair.category, "value": outcome.pair.value}

        return {
            "target": self.target,
            "state": self._state.value,
            "conclusion": conclusion,
            "unanswered": outcome.unanswered if isinstance(outcome, Exhausted) else None,
            "facts": self.facts,
            "fired_rules": list(self.fired_rules),
            "transcript": [turn.to_dict() for turn in self._turns],
            "started_at": self._started_at.isoformat() if self._started_at else None,
        }
