"""Ponto de entrada principal do aplicativo."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from .config.settings import Settings, get_settings
from .core import (
    KnowledgeBase,
    KnowledgeBaseCache,
    KnowledgeError,
    KnowledgeValidator,
    NeedsInput,
    QuerySession,
    Resolved,
    SessionMisuseError,
    get_kb_cache,
    load_knowledge_base,
    run_repl,
)
from .utils.console_utils import get_printer

# Configuração de logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EXIT_WORDS = ("sair", "exit", "quit")


def setup_logging(verbose: bool = False, default_level: str = "INFO") -> None:
    """Configura nível de logging."""
    level = logging.DEBUG if verbose else getattr(logging, default_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def _cache_for(settings: Settings) -> Optional[KnowledgeBaseCache]:
    if not settings.cache.enabled:
        return None
    return get_kb_cache(settings.cache.max_entries, settings.dsl.to_keywords())


def _load_base(settings: Settings, file_path: str) -> KnowledgeBase:
    """Carrega a base ou encerra com código 1 exibindo o erro."""
    printer = get_printer()
    path = Path(file_path)

    try:
        cache = _cache_for(settings)
        if cache is not None:
            return cache.get_or_load(path)
        return load_knowledge_base(
            path.read_text(encoding=settings.dsl.encoding),
            settings.dsl.to_keywords(),
        )
    except KnowledgeError as e:
        printer.print_error(str(e))
        sys.exit(1)
    except UnicodeDecodeError as e:
        printer.print_error(f"{path.name} não está em {settings.dsl.encoding}: {e.reason}")
        sys.exit(1)


def _parse_facts(facts: Tuple[str, ...]) -> dict:
    parsed = {}
    for item in facts:
        category, sep, value = item.partition("=")
        if not sep or not category.strip() or not value.strip():
            raise click.BadParameter(f"Use categoria=valor (recebido: {item!r})", param_hint="--fact")
        parsed[category.strip()] = value.strip()
    return parsed


@click.group()
@click.version_option(version="1.0.0")
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Arquivo de configuração YAML"
)
@click.option("-v", "--verbose", is_flag=True, help="Modo verboso")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool):
    """Expertsys - Sistema especialista baseado em regras."""
    settings = Settings.from_yaml(Path(config)) if config else get_settings()
    setup_logging(verbose, settings.app.log_level)
    ctx.obj = settings


@cli.command()
@click.argument("kb_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def validate(settings: Settings, kb_file: str):
    """
    Valida sintaxe e semântica de uma base de conhecimento.

    KB_FILE: Arquivo da base (.kb)
    """
    validator = KnowledgeValidator(
        settings.dsl.to_keywords(),
        settings.dsl.encoding,
        settings.dsl.extension,
    )
    report = validator.validate_file(kb_file)

    get_printer().print(report.format(), markup=False, highlight=False)
    sys.exit(0 if report.is_valid else 1)


@cli.command()
@click.argument("kb_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def info(settings: Settings, kb_file: str):
    """
    Exibe categorias, valores e textos associados da base.

    KB_FILE: Arquivo da base (.kb)
    """
    printer = get_printer()
    base = _load_base(settings, kb_file)

    table = printer.table(title=f"Base: {Path(kb_file).name}")
    table.add_column("Categoria", style="cyan")
    table.add_column("Valores", style="green")
    table.add_column("Tradução")
    table.add_column("Pergunta")
    table.add_column("Dica", style="muted")

    categories = list(base.categories)
    for category in list(base.advice) + list(base.translations) + list(base.tips):
        if category not in categories:
            categories.append(category)

    for category in categories:
        table.add_row(
            category,
            ", ".join(base.values_for(category)),
            base.translation_for(category) or "",
            base.question_for(category) or "",
            base.tip_for(category) or "",
        )

    printer.print(table)

    summary = base.summary()
    printer.print_info(
        f"{summary['rules']} regras, {summary['questions']} perguntas, "
        f"categorias finais: {', '.join(summary['goals']) or '-'}"
    )


@cli.command()
@click.argument("kb_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-t", "--target", help="Categoria a resolver (padrão: melhor conclusão)")
@click.option(
    "-f", "--fact",
    "facts",
    multiple=True,
    help="Fato inicial categoria=valor (pode usar múltiplas vezes)"
)
@click.option("--json", "as_json", is_flag=True, help="Exibe a sessão final em JSON")
@click.option(
    "--focused",
    is_flag=True,
    help="Pergunta apenas o que ainda pode levar ao alvo"
)
@click.pass_obj
def ask(
    settings: Settings,
    kb_file: str,
    target: Optional[str],
    facts: Tuple[str, ...],
    as_json: bool,
    focused: bool,
):
    """
    Conduz uma consulta interativa.

    KB_FILE: Arquivo da base (.kb)
    """
    printer = get_printer()
    base = _load_base(settings, kb_file)
    session = QuerySession(base, focused=focused)

    try:
        outcome = session.start(target, _parse_facts(facts))
    except SessionMisuseError as e:
        printer.print_error(str(e))
        sys.exit(1)

    while isinstance(outcome, NeedsInput):
        printer.question(base, outcome)

        try:
            value = printer.input("> ").strip()
        except EOFError:
            value = EXIT_WORDS[0]

        if value.lower() in EXIT_WORDS:
            session.cancel()
            printer.print_warning("Consulta cancelada")
            sys.exit(1)

        try:
            outcome = session.answer(outcome.category, value)
        except SessionMisuseError as e:
            printer.print_error(str(e))

    printer.outcome(base, outcome)
    printer.explanation(session.explain())

    if as_json:
        click.echo(json.dumps(session.to_dict(), ensure_ascii=False, indent=2))

    sys.exit(0 if isinstance(outcome, Resolved) else 2)


@cli.command()
@click.argument("kb_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def dump(settings: Settings, kb_file: str):
    """
    Reescreve a base no formato canônico.

    KB_FILE: Arquivo da base (.kb)
    """
    base = _load_base(settings, kb_file)
    click.echo(base.to_text(settings.dsl.to_keywords()), nl=False)


@cli.command()
@click.argument("kb_file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def repl(settings: Settings, kb_file: Optional[str]):
    """
    Inicia o REPL interativo.

    KB_FILE: Arquivo da base (.kb), opcional (padrão: knowledge.default_file)
    """
    if kb_file is None and settings.knowledge.default_file:
        default = Path(settings.knowledge.directory) / settings.knowledge.default_file
        if default.exists():
            kb_file = str(default)
        else:
            logger.debug(f"Base padrão não encontrada: {default}")

    run_repl(kb_file, cache=_cache_for(settings), keywords=settings.dsl.to_keywords())


def main():
    """Ponto de entrada para console_scripts."""
    cli()


if __name__ == "__main__":
    main()
