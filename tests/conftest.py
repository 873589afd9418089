"""Fixtures compartilhadas dos testes."""

from pathlib import Path

import pytest

from expertsys.core import load_knowledge_base
from expertsys.core.cache import reset_kb_cache
from expertsys.config.settings import reset_settings


WEATHER_KB = """\
1 если погода-дождь то действие-зонт
2 если погода-снег и ветер-сильный то действие-шарф
3 если погода-снег и ветер-слабый то действие-шапка
4 если погода-солнце то действие-очки
5 если действие-зонт то обувь-сапоги
6 если действие-очки то обувь-кроссовки

вопрос погода Какая сегодня погода?
вопрос ветер Какой сегодня ветер?

перевод действие Что взять с собой
перевод обувь Какую обувь надеть

подсказка действие Проверьте прогноз перед выходом
"""

UMBRELLA_KB = """\
1 если погода-дождь то действие-зонт
вопрос погода Какая сегодня погода?
"""


@pytest.fixture
def weather_text():
    return WEATHER_KB


@pytest.fixture
def weather_base():
    return load_knowledge_base(WEATHER_KB)


@pytest.fixture
def umbrella_base():
    return load_knowledge_base(UMBRELLA_KB)


@pytest.fixture
def weather_file(tmp_path) -> Path:
    path = tmp_path / "weather.kb"
    path.write_text(WEATHER_KB, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_globals():
    reset_settings()
    reset_kb_cache()
    yield
    reset_settings()
    reset_kb_cache()
