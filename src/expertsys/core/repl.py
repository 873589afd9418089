"""
REPL interativo para bases de conhecimento.

Permite carregar uma base, inspecionar regras e perguntas e
conduzir consultas respondendo às perguntas do motor.
"""

from __future__ import annotations

import cmd
import logging
from pathlib import Path
from typing import Dict, Optional

from .cache import KnowledgeBaseCache
from .errors import KnowledgeError
from .knowledge_base import KnowledgeBase
from .models import DSLKeywords, Exhausted, NeedsInput, Resolved
from .session import QuerySession, SessionState
from .validator import KnowledgeValidator

logger = logging.getLogger(__name__)


class KnowledgeREPL(cmd.Cmd):
    """
    REPL interativo para consultas.

    Uso:
        repl = KnowledgeREPL("knowledge/погода.kb")
        repl.cmdloop()
    """

    intro = """
+-----------------------------------------------------------+
|            EXPERTSYS - Sistema Especialista               |
+-----------------------------------------------------------+
|  Comandos:                                                |
|    load <arquivo>        - Carrega uma base               |
|    info                  - Resumo da base carregada       |
|    rules / questions     - Lista regras / perguntas       |
|    fact <cat> <valor>    - Define um fato inicial         |
|    start [categoria]     - Inicia uma consulta            |
|    answer <valor>        - Responde a pergunta pendente   |
|    explain / cancel      - Explica / cancela a consulta   |
|    exit / quit           - Sai do REPL                    |
+-----------------------------------------------------------+
"""

    prompt = "\n[ES] > "

    def __init__(
        self,
        kb_path: Optional[Path | str] = None,
        cache: Optional[KnowledgeBaseCache] = None,
        keywords: Optional[DSLKeywords] = None,
        stdin=None,
        stdout=None,
    ):
        super().__init__(stdin=stdin, stdout=stdout)
        if stdin is not None:
            self.use_rawinput = False

        self.keywords = keywords
        self.cache = cache or KnowledgeBaseCache(keywords=keywords)
        self.kb_path: Optional[Path] = None
        self.base: Optional[KnowledgeBase] = None
        self.session: Optional[QuerySession] = None
        self.initial_facts: Dict[str, str] = {}

        if kb_path:
            self.load_base(kb_path)

    def load_base(self, kb_path: Path | str) -> bool:
        """Carrega a base de conhecimento."""
        self.kb_path = Path(kb_path)

        try:
            self.base = self.cache.get_or_load(self.kb_path)
        except FileNotFoundError:
            self._print(f"[X] Arquivo não encontrado: {self.kb_path}")
            return False
        except KnowledgeError as e:
            self._print(f"[X] Erro ao carregar: {e}")
            return False
        except UnicodeDecodeError as e:
            self._print(f"[X] Codificação inválida em {self.kb_path.name}: {e.reason}")
            return False

        self.session = None
        self.initial_facts = {}
        summary = self.base.summary()
        self._print(f"[OK] Carregado: {self.kb_path.name}")
        self._print(f"   Regras: {summary['rules']} | Perguntas: {summary['questions']}")
        return True

    def _print(self, text: str) -> None:
        self.stdout.write(text + "\n")

    def _ensure_loaded(self) -> bool:
        if self.base is None:
            self._print("[!] Nenhuma base carregada")
            self._print("   Use: load <caminho>")
            return False
        return True

    def _show_outcome(self, outcome) -> None:
        if isinstance(outcome, NeedsInput):
            self._print(f"? {outcome.prompt}")
            if outcome.choices:
                self._print(f"   Opções: {', '.join(outcome.choices)}")
            tip = self.base.tip_for(outcome.category)
            if tip:
                self._print(f"   Dica: {tip}")
            self._print("   Use: answer <valor>")
        elif isinstance(outcome, Resolved):
            self._print(f"[OK] {self.base.label_for(outcome.pair.category)}: {outcome.pair.value}")
            tip = self.base.tip_for(outcome.pair.category)
            if tip:
                self._print(f"   Dica: {tip}")
        elif isinstance(outcome, Exhausted):
            self._print("[X] Sem conclusão")
            if outcome.unanswered:
                self._print(f"   Sem pergunta para: {self.base.label_for(outcome.unanswered)}")

    # ========================================
    # Comandos
    # ========================================

    def do_load(self, arg: str) -> None:
        """Carrega uma base: load <caminho>"""
        if not arg:
            self._print("Uso: load <caminho_do_arquivo.kb>")
            return

        self.load_base(arg.strip())

    def do_reload(self, arg: str) -> None:
        """Recarrega a base atual"""
        if not self.kb_path:
            self._print("[!] Nenhum arquivo carregado para recarregar")
            return

        self.cache.invalidate(self.kb_path)
        self.load_base(self.kb_path)

    def do_info(self, arg: str) -> None:
        """Mostra o resumo da base carregada"""
        if not self._ensure_loaded():
            return

        summary = self.base.summary()
        self._print(f"\nArquivo: {self.kb_path}")
        for key in ("rules", "categories", "questions", "translations", "tips"):
            self._print(f"   • {key}: {summary[key]}")
        self._print(f"   • goals: {', '.join(summary['goals']) or '-'}")

    def do_rules(self, arg: str) -> None:
        """Lista as regras"""
        if not self._ensure_loaded():
            return

        for rule in self.base.rules:
            self._print(f"  {rule.to_dsl(self.keywords)}")

    def do_questions(self, arg: str) -> None:
        """Lista as perguntas por categoria"""
        if not self._ensure_loaded():
            return

        for category, binding in self.base.advice.items():
            self._print(f"  {category}: {binding.text}")

    def do_fact(self, arg: str) -> None:
        """Define um fato inicial para a próxima consulta: fact <categoria> <valor>"""
        parts = arg.split()
        if len(parts) != 2:
            self._print("Uso: fact <categoria> <valor>")
            return

        self.initial_facts[parts[0]] = parts[1]
        self._print(f"   {parts[0]}-{parts[1]}")

    def do_facts(self, arg: str) -> None:
        """Mostra os fatos conhecidos"""
        facts = self.session.facts if self.session else self.initial_facts
        if not facts:
            self._print("   (nenhum fato)")
            return

        for category, value in facts.items():
            self._print(f"   {category}-{value}")

    def do_start(self, arg: str) -> None:
        """Inicia uma consulta: start [categoria]"""
        if not self._ensure_loaded():
            return

        self.session = QuerySession(self.base)
        try:
            outcome = self.session.start(arg.strip() or None, self.initial_facts)
        except KnowledgeError as e:
            self._print(f"[X] {e}")
            return

        self._show_outcome(outcome)

    def do_answer(self, arg: str) -> None:
        """Responde a pergunta pendente: answer <valor>"""
        if self.session is None or self.session.state != SessionState.AWAITING_INPUT:
            self._print("[!] Nenhuma pergunta pendente")
            return

        value = arg.strip()
        if not value:
            self._print("Uso: answer <valor>")
            return

        try:
            outcome = self.session.answer(self.session.outcome.category, value)
        except KnowledgeError as e:
            self._print(f"[X] {e}")
            return

        self._show_outcome(outcome)

    def do_explain(self, arg: str) -> None:
        """Explica a consulta atual"""
        if self.session is None:
            self._print("[!] Nenhuma consulta iniciada")
            return

        self._print(self.session.explain())

    def do_cancel(self, arg: str) -> None:
        """Cancela a consulta atual"""
        if self.session is None:
            self._print("[!] Nenhuma consulta iniciada")
            return

        self.session.cancel()
        self.initial_facts = {}
        self._print("   Consulta cancelada")

    def do_validate(self, arg: str) -> None:
        """Valida o arquivo carregado"""
        if not self.kb_path:
            self._print("[!] Nenhum arquivo carregado")
            return

        report = KnowledgeValidator(self.keywords).validate_file(self.kb_path)
        self._print(report.format())

    def do_dump(self, arg: str) -> None:
        """Mostra a base serializada"""
        if not self._ensure_loaded():
            return

        self.stdout.write(self.base.to_text(self.keywords))

    def do_exit(self, arg: str) -> bool:
        """Sai do REPL"""
        self._print("\nAté logo!")
        return True

    def do_quit(self, arg: str) -> bool:
        """Sai do REPL"""
        return self.do_exit(arg)

    def do_EOF(self, arg: str) -> bool:
        """Sai do REPL (Ctrl+D)"""
        self._print("")
        return self.do_exit(arg)

    def default(self, line: str) -> None:
        self._print(f"? Comando desconhecido: {line}")
        self._print("   Digite 'help' para ver os comandos disponíveis")

    def emptyline(self) -> None:
        pass


def run_repl(
    kb_path: Optional[Path | str] = None,
    cache: Optional[KnowledgeBaseCache] = None,
    keywords: Optional[DSLKeywords] = None,
) -> None:
    """Inicia o REPL interativo."""
    repl = KnowledgeREPL(kb_path, cache=cache, keywords=keywords)
    try:
        repl.cmdloop()
    except KeyboardInterrupt:
        print("\n\nAté logo!")
