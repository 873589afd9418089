"""
Saída de console da CLI.

Formata perguntas, conclusões e mensagens de status com rich. As
bases costumam usar cirílico, então terminais sem Unicode (console
legado do Windows) recebem texto com caracteres substituídos em vez
de uma exceção.
"""

import platform
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from ..core import Exhausted, KnowledgeBase, NeedsInput, Resolved

IS_WINDOWS = platform.system() == "Windows"

THEME = Theme({
    "question": "bold magenta",
    "conclusion": "bold green",
    "status.error": "red bold",
    "status.warning": "yellow",
    "status.info": "cyan",
    "muted": "dim",
})

# Marcadores ASCII, legíveis em qualquer terminal
MARKS = {
    "ok": "[OK]",
    "error": "[X] ERRO:",
    "warning": "[!]",
    "info": "",
}


def create_console() -> Console:
    """Console configurada para o terminal atual."""
    if IS_WINDOWS:
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding="utf-8", errors="replace")
        return Console(theme=THEME, legacy_windows=True, safe_box=True)
    return Console(theme=THEME)


class SafePrinter:
    """
    Impressão da CLI com fallback ASCII.

    Uso:
        printer = get_printer()
        printer.question(base, outcome)
        printer.outcome(base, outcome)
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or create_console()

    def print(self, *args, **kwargs) -> None:
        try:
            self.console.print(*args, **kwargs)
        except UnicodeEncodeError:
            text = " ".join(str(arg) for arg in args)
            self.console.print(text.encode("ascii", errors="replace").decode("ascii"), **kwargs)

    def input(self, prompt: str = "") -> str:
        try:
            return self.console.input(prompt)
        except UnicodeEncodeError:
            return input(prompt.encode("ascii", errors="replace").decode("ascii"))

    # ========================================
    # Mensagens de status
    # ========================================

    def status(self, level: str, message: str) -> None:
        """Mensagem de status; o texto nunca é interpretado como markup."""
        style = "conclusion" if level == "ok" else f"status.{level}"
        mark = MARKS[level]
        text = f"{mark} {escape(message)}" if mark else escape(message)
        self.print(f"[{style}]{text}[/{style}]")

    def print_error(self, message: str) -> None:
        self.status("error", message)

    def print_success(self, message: str) -> None:
        self.status("ok", message)

    def print_warning(self, message: str) -> None:
        self.status("warning", message)

    def print_info(self, message: str) -> None:
        self.status("info", message)

    # ========================================
    # Consultas
    # ========================================

    def question(self, base: KnowledgeBase, outcome: NeedsInput) -> None:
        """Exibe a pergunta pendente com as opções conhecidas e a dica."""
        self.print(f"\n[question]{escape(outcome.prompt)}[/question]")
        if outcome.choices:
            self.print(f"[muted]Opções: {escape(', '.join(outcome.choices))}[/muted]")
        tip = base.tip_for(outcome.category)
        if tip:
            self.print(f"[muted]Dica: {escape(tip)}[/muted]")

    def outcome(self, base: KnowledgeBase, outcome) -> None:
        """Exibe o resultado final (Resolved ou Exhausted)."""
        if isinstance(outcome, Resolved):
            label = base.label_for(outcome.pair.category)
            self.print_success(f"{label}: {outcome.pair.value}")
        elif isinstance(outcome, Exhausted):
            if outcome.unanswered:
                self.print_warning(
                    f"Sem conclusão: não há pergunta para '{base.label_for(outcome.unanswered)}'"
                )
            else:
                self.print_warning("Não foi possível chegar a uma conclusão")

    def explanation(self, text: str) -> None:
        self.print(Panel(escape(text), title="Explicação", safe_box=True))

    def table(self, title: str = "", **kwargs) -> Table:
        return Table(title=title, safe_box=True, **kwargs)


_printer: Optional[SafePrinter] = None


def get_printer() -> SafePrinter:
    """Instância global usada pela CLI."""
    global _printer
    if _printer is None:
        _printer = SafePrinter()
    return _printer
