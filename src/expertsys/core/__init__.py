"""
Núcleo do sistema especialista.

Funcionalidades:
- Parser da linguagem de base de conhecimento (regras, perguntas,
  traduções e dicas)
- Construção e validação da base imutável
- Motor de inferência por encadeamento para frente
- Sessões de consulta com perguntas e respostas

Uso básico:
    from expertsys.core import load_knowledge_base, QuerySession

    base = load_knowledge_base(text)
    session = QuerySession(base)
    outcome = session.start("действие")
"""

from .models import (
    DSLKeywords,
    Pair,
    Rule,
    Binding,
    BindingKind,
    NodeKind,
    ParseNode,
    Resolved,
    NeedsInput,
    Exhausted,
)
from .errors import (
    KnowledgeError,
    DSLSyntaxError,
    ValidationError,
    ValidationIssue,
    IssueCode,
    SessionMisuseError,
)
from .parser import KnowledgeParser
from .knowledge_base import KnowledgeBase
from .builder import KnowledgeBuilder, load_knowledge_base
from .engine import InferenceEngine, Outcome, resolve
from .session import QuerySession, SessionState, SessionTurn
from .validator import KnowledgeValidator, ValidationReport
from .cache import KnowledgeBaseCache, get_kb_cache
from .repl import KnowledgeREPL, run_repl

__all__ = [
    # Models
    "DSLKeywords",
    "Pair",
    "Rule",
    "Binding",
    "BindingKind",
    "NodeKind",
    "ParseNode",
    "Resolved",
    "NeedsInput",
    "Exhausted",
    # Errors
    "KnowledgeError",
    "DSLSyntaxError",
    "ValidationError",
    "ValidationIssue",
    "IssueCode",
    "SessionMisuseError",
    # Core
    "KnowledgeParser",
    "KnowledgeBase",
    "KnowledgeBuilder",
    "load_knowledge_base",
    "InferenceEngine",
    "Outcome",
    "resolve",
    "QuerySession",
    "SessionState",
    "SessionTurn",
    # Tools
    "KnowledgeValidator",
    "ValidationReport",
    "KnowledgeBaseCache",
    "get_kb_cache",
    "KnowledgeREPL",
    "run_repl",
]
