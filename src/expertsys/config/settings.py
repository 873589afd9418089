"""Gerenciador de configurações do aplicativo."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from ..core.models import DSLKeywords

CONFIG_ENV_VAR = "EXPERTSYS_CONFIG"


@dataclass
class AppConfig:
    """Configurações gerais do aplicativo."""

    name: str = "Expertsys"
    version: str = "1.0.0"
    language: str = "pt-BR"
    log_level: str = "INFO"


@dataclass
class DSLConfig:
    """Configurações da linguagem de base de conhecimento."""

    encoding: str = "utf-8"
    extension: str = ".kb"
    keywords: Dict[str, str] = field(default_factory=lambda: DSLKeywords().as_dict())

    def to_keywords(self) -> DSLKeywords:
        """Converte as palavras-chave configuradas (parciais ou completas)."""
        return DSLKeywords(**{**DSLKeywords().as_dict(), **self.keywords})


@dataclass
class CacheConfig:
    """Configurações do cache de bases carregadas."""

    enabled: bool = True
    max_entries: int = 50


@dataclass
class KnowledgeConfig:
    """Localização das bases de conhecimento."""

    directory: str = "./knowledge"
    default_file: str = ""


@dataclass
class Settings:
    """Configurações completas do aplicativo."""

    app: AppConfig = field(default_factory=AppConfig)
    dsl: DSLConfig = field(default_factory=DSLConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    knowledge: KnowledgeConfig = field(default_factory=KnowledgeConfig)

    @classmethod
    def from_yaml(cls, config_path: Path) -> "Settings":
        """Carrega configurações de um arquivo YAML."""
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Cria Settings a partir de um dicionário."""
        settings = cls()

        if "app" in data:
            settings.app = AppConfig(**data["app"])

        if "dsl" in data:
            dsl_data = dict(data["dsl"])
            keywords = dsl_data.pop("keywords", None) or {}
            settings.dsl = DSLConfig(**dsl_data)
            settings.dsl.keywords = {**DSLKeywords().as_dict(), **keywords}
            # Valida já na carga
            settings.dsl.to_keywords()

        if "cache" in data:
            settings.cache = CacheConfig(**data["cache"])

        if "knowledge" in data:
            settings.knowledge = KnowledgeConfig(**data["knowledge"])

        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Converte configurações para dicionário."""
        return asdict(self)


# Singleton para configurações globais
_settings: Optional[Settings] = None


def get_settings(config_path: Optional[Path] = None) -> Settings:
    """
    Obtém as configurações globais do aplicativo.

    Args:
        config_path: Caminho para o arquivo de configuração.
                    Se não fornecido, usa $EXPERTSYS_CONFIG ou o
                    config.yaml na raiz do projeto.

    Returns:
        Settings: Instância das configurações.
    """
    global _settings

    # Carrega variáveis de ambiente
    load_dotenv()

    if _settings is None or config_path is not None:
        if config_path is None:
            env_path = os.getenv(CONFIG_ENV_VAR)
            if env_path:
                config_path = Path(env_path)
            else:
                config_path = Path(__file__).parent.parent.parent.parent / "config.yaml"

        if config_path.exists():
            _settings = Settings.from_yaml(config_path)
        else:
            _settings = Settings()

    return _settings


def reset_settings() -> None:
    """Reseta as configurações globais (útil para testes)."""
    global _settings
    _settings = None
