"""
Cache de bases de conhecimento.

Armazena bases já construídas para evitar re-parsing a cada
consulta. Invalida automaticamente quando o arquivo de origem
é modificado.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .builder import load_knowledge_base
from .knowledge_base import KnowledgeBase
from .models import DSLKeywords

logger = logging.getLogger(__name__)


@dataclass
class CachedBase:
    """Base em cache."""

    base: KnowledgeBase
    file_path: str
    file_hash: str
    cached_at: datetime
    access_count: int = 0

    def is_stale(self, current_hash: str) -> bool:
        """Verifica se o cache está desatualizado."""
        return self.file_hash != current_hash


class KnowledgeBaseCache:
    """
    Cache de bases de conhecimento construídas a partir de arquivos.

    Uso:
        cache = KnowledgeBaseCache()
        base = cache.get_or_load("knowledge/погода.kb")
    """

    def __init__(
        self,
        max_entries: int = 50,
        keywords: Optional[DSLKeywords] = None,
        encoding: str = "utf-8",
    ):
        """
        Inicializa o cache.

        Args:
            max_entries: Número máximo de entradas
            keywords: Palavras-chave usadas ao carregar arquivos
            encoding: Codificação dos arquivos
        """
        self.max_entries = max_entries
        self.keywords = keywords
        self.encoding = encoding
        self._cache: Dict[str, CachedBase] = {}

    def _compute_file_hash(self, file_path: Path) -> str:
        """Calcula hash do arquivo."""
        if not file_path.exists():
            return ""

        content = file_path.read_bytes()
        return hashlib.md5(content).hexdigest()[:12]

    def get(self, file_path: Path | str) -> Optional[KnowledgeBase]:
        """
        Obtém a base do cache.

        Returns:
            KnowledgeBase ou None se não está em cache ou está desatualizada
        """
        file_path = Path(file_path)
        key = str(file_path.absolute())

        if key not in self._cache:
            return None

        cached = self._cache[key]
        current_hash = self._compute_file_hash(file_path)

        if cached.is_stale(current_hash):
            logger.debug(f"Cache desatualizado: {file_path.name}")
            del self._cache[key]
            return None

        cached.access_count += 1

        logger.debug(f"Cache hit: {file_path.name}")
        return cached.base

    def get_or_load(self, file_path: Path | str) -> KnowledgeBase:
        """
        Obtém do cache ou carrega do arquivo.

        Raises:
            FileNotFoundError: Arquivo não existe
            DSLSyntaxError: Texto fora da gramática
            ValidationError: Conhecimento inconsistente
        """
        file_path = Path(file_path)

        base = self.get(file_path)
        if base is not None:
            return base

        if not file_path.exists():
            raise FileNotFoundError(f"Arquivo não encontrado: {file_path}")

        base = load_knowledge_base(
            file_path.read_text(encoding=self.encoding),
            self.keywords,
        )
        self.set(file_path, base)
        logger.info(f"Base carregada: {file_path.name} ({len(base.rules)} regras)")
        return base

    def set(self, file_path: Path | str, base: KnowledgeBase) -> None:
        """Armazena a base no cache."""
        file_path = Path(file_path)
        key = str(file_path.absolute())

        if key not in self._cache and len(self._cache) >= self.max_entries:
            self._evict_lru()

        self._cache[key] = CachedBase(
            base=base,
            file_path=key,
            file_hash=self._compute_file_hash(file_path),
            cached_at=datetime.now(),
        )

        logger.debug(f"Cache set: {file_path.name}")

    def invalidate(self, file_path: Optional[Path | str] = None) -> int:
        """
        Invalida entradas do cache.

        Args:
            file_path: Arquivo específico ou None para todos

        Returns:
            Número de entradas removidas
        """
        if file_path:
            key = str(Path(file_path).absolute())
            if key in self._cache:
                del self._cache[key]
                return 1
            return 0

        count = len(self._cache)
        self._cache.clear()
        return count

    def _evict_lru(self) -> None:
        """Remove a entrada menos acessada."""
        if not self._cache:
            return

        lru_key = min(self._cache.keys(), key=lambda k: self._cache[k].access_count)

        del self._cache[lru_key]
        logger.debug(f"Cache evicted: {lru_key}")

    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """Retorna estatísticas do cache."""
        return {
            "entries": len(self._cache),
            "max_entries": self.max_entries,
            "total_accesses": sum(c.access_count for c in self._cache.values()),
            "files": [
                {
                    "path": Path(c.file_path).name,
                    "rules": len(c.base.rules),
                    "questions": len(c.base.advice),
                    "accesses": c.access_count,
                }
                for c in self._cache.values()
            ],
        }


# Singleton global
_kb_cache: Optional[KnowledgeBaseCache] = None


def get_kb_cache(
    max_entries: int = 50,
    keywords: Optional[DSLKeywords] = None,
) -> KnowledgeBaseCache:
    """Obtém instância singleton do cache (usada pela CLI e pelo REPL)."""
    global _kb_cache
    if _kb_cache is None:
        _kb_cache = KnowledgeBaseCache(max_entries=max_entries, keywords=keywords)
    return _kb_cache


def reset_kb_cache() -> None:
    """Descarta o cache global (útil para testes)."""
    global _kb_cache
    _kb_cache = None
