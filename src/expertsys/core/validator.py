"""
Validador de arquivos de base de conhecimento.

Verifica sintaxe e semântica, reunindo erros, avisos e
informações em um relatório com mensagens amigáveis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .builder import KnowledgeBuilder
from .errors import DSLSyntaxError, ValidationError
from .knowledge_base import KnowledgeBase
from .models import DSLKeywords
from .parser import KnowledgeParser

logger = logging.getLogger(__name__)


@dataclass
class ReportIssue:
    """Representa um problema encontrado na validação."""

    level: str  # "error", "warning", "info"
    message: str
    line: Optional[int] = None
    suggestion: str = ""

    def format(self) -> str:
        """Formata o issue para exibição."""
        icon = {"error": "[X]", "warning": "[!]", "info": "[I]"}.get(self.level, "*")

        head = f"{icon} {self.message}"
        if self.line:
            head = f"{icon} Linha {self.line}: {self.message}"

        if self.suggestion:
            return f"{head}\n    Sugestão: {self.suggestion}"
        return head


@dataclass
class ValidationReport:
    """Relatório completo de validação."""

    source: str
    is_valid: bool
    errors: List[ReportIssue] = field(default_factory=list)
    warnings: List[ReportIssue] = field(default_factory=list)
    info: List[ReportIssue] = field(default_factory=list)
    base: Optional[KnowledgeBase] = None

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def format(self) -> str:
        """Formata o relatório para exibição."""
        lines = [
            "=" * 60,
            f"  VALIDAÇÃO: {Path(self.source).name}",
            "=" * 60,
        ]

        if self.is_valid:
            lines.append("  Base válida e pronta para uso")
        else:
            lines.append("  Base contém erros que precisam ser corrigidos")

        if self.base is not None:
            summary = self.base.summary()
            lines.extend([
                "-" * 60,
                f"  Regras: {summary['rules']}",
                f"  Categorias: {summary['categories']}",
                f"  Perguntas: {summary['questions']}",
                f"  Traduções: {summary['translations']}",
                f"  Dicas: {summary['tips']}",
            ])

        for title, issues in (
            ("ERROS", self.errors),
            ("AVISOS", self.warnings),
            ("INFORMAÇÕES", self.info),
        ):
            if issues:
                lines.append("-" * 60)
                lines.append(f"  {title}:")
                for issue in issues:
                    lines.extend(f"  {line}" for line in issue.format().split("\n"))

        lines.extend([
            "-" * 60,
            f"  {len(self.errors)} erro(s), {len(self.warnings)} aviso(s)",
            "=" * 60,
        ])
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serializa para dicionário."""
        return {
            "source": self.source,
            "is_valid": self.is_valid,
            "errors_count": len(self.errors),
            "warnings_count": len(self.warnings),
            "errors": [{"message": e.message, "line": e.line} for e in self.errors],
            "warnings": [{"message": w.message, "line": w.line} for w in self.warnings],
            "summary": self.base.summary() if self.base is not None else None,
        }


class KnowledgeValidator:
    """
    Validador de bases de conhecimento.

    Uso:
        validator = KnowledgeValidator()
        report = validator.validate_file("knowledge/погода.kb")

        if not report.is_valid:
            print(report.format())
    """

    EXTENSION = ".kb"

    def __init__(
        self,
        keywords: Optional[DSLKeywords] = None,
        encoding: str = "utf-8",
        extension: str = EXTENSION,
    ):
        self.keywords = keywords
        self.encoding = encoding
        self.extension = extension

    def validate_file(self, file_path: Path | str) -> ValidationReport:
        """Valida um arquivo de base de conhecimento."""
        file_path = Path(file_path)

        if not file_path.exists():
            report = ValidationReport(source=str(file_path), is_valid=False)
            report.errors.append(ReportIssue(
                level="error",
                message=f"Arquivo não encontrado: {file_path}",
                suggestion="Verifique o caminho do arquivo.",
            ))
            return report

        try:
            content = file_path.read_text(encoding=self.encoding)
        except UnicodeDecodeError as e:
            report = ValidationReport(source=str(file_path), is_valid=False)
            report.errors.append(ReportIssue(
                level="error",
                message=f"Arquivo não está em {self.encoding}: {e.reason} (byte {e.start})",
                suggestion="Salve o arquivo em UTF-8 ou ajuste dsl.encoding na configuração.",
            ))
            return report

        report = self.validate_content(content, source=str(file_path))

        if file_path.suffix != self.extension:
            report.warnings.append(ReportIssue(
                level="warning",
                message=f"Extensão inesperada: {file_path.suffix or '(nenhuma)'}",
                suggestion=f"Use a extensão {self.extension} para bases de conhecimento.",
            ))

        return report

    def validate_content(self, content: str, source: str = "<inline>") -> ValidationReport:
        """Valida o conteúdo de uma base (sem arquivo)."""
        report = ValidationReport(source=source, is_valid=True)
        builder = KnowledgeBuilder()

        try:
            nodes = KnowledgeParser(self.keywords).parse(content)
            report.base = builder.build(nodes)
        except DSLSyntaxError as e:
            report.errors.append(ReportIssue(
                level="error",
                message=str(e),
                line=e.line,
                suggestion="Verifique a sintaxe da entrada.",
            ))
        except ValidationError as e:
            for issue in e.issues:
                report.errors.append(ReportIssue(
                    level="error",
                    message=issue.message,
                    line=issue.line,
                ))

        for warning in builder.warnings:
            report.warnings.append(ReportIssue(level="warning", message=warning))

        if report.base is not None:
            self._check_labels(report.base, report)

        report.is_valid = not report.has_errors
        logger.debug(
            f"Validação de {source}: {len(report.errors)} erro(s), "
            f"{len(report.warnings)} aviso(s)"
        )
        return report

    def _check_labels(self, base: KnowledgeBase, report: ValidationReport) -> None:
        """Informa categorias finais sem tradução."""
        for category in base.goal_categories:
            if base.translation_for(category) is None:
                report.info.append(ReportIssue(
                    level="info",
                    message=f"Categoria final '{category}' sem tradução",
                    suggestion="Adicione uma entrada de tradução para exibir um rótulo legível.",
                ))
