"""
Configuration pytest pour les tests mdbook-translator.

Ce fichier contient les fixtures communes à tous les tests.
"""

import json
from typing import Any, Callable, Optional

import pytest

from mdbook_translator.config import Defaults
from mdbook_translator.logger import LogSession


class StubLLM:
    """
    Faux client LLM : applique ``transform`` au texte et enregistre les appels.

    Attributes:
        calls: Liste des (texte, langue, prompt supplémentaire) reçus
    """

    def __init__(
        self,
        transform: Callable[[str], str] = str.upper,
        fail_on_call: Optional[int] = None,
        error: Optional[Exception] = None,
    ):
        self.transform = transform
        self.fail_on_call = fail_on_call
        self.error = error
        self.calls: list[tuple[str, str, Optional[str]]] = []

    def translate(
        self,
        text: str,
        target_language: str,
        extra_prompt: Optional[str] = None,
        context: Optional[str] = None,
    ) -> str:
        self.calls.append((text, target_language, extra_prompt))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            assert self.error is not None
            raise self.error
        return self.transform(text)


@pytest.fixture(autouse=True)
def isolated_log_session(tmp_path, monkeypatch):
    """Redirige les logs de session vers un répertoire temporaire."""
    monkeypatch.setenv(Defaults.log_dir_env, str(tmp_path / "logs"))
    LogSession.reset()
    yield tmp_path / "logs"
    LogSession.reset()


@pytest.fixture
def stub_llm():
    """Faux client LLM qui met le texte en majuscules."""
    return StubLLM()


@pytest.fixture
def cache_file(tmp_path):
    """Chemin d'un fichier de cache temporaire (non créé)."""
    return tmp_path / "cache.json"


def chapter_json(
    name: str,
    content: str,
    number: Optional[list[int]] = None,
    sub_items: Optional[list[Any]] = None,
) -> dict[str, Any]:
    """Construit un chapitre au format JSON de mdBook."""
    return {
        "Chapter": {
            "name": name,
            "content": content,
            "number": number,
            "sub_items": sub_items or [],
            "path": f"{name.lower()}.md",
            "source_path": f"{name.lower()}.md",
            "parent_names": [],
        }
    }


def mdbook_input(
    sections: list[Any],
    translator_config: Optional[dict[str, Any]] = None,
    mdbook_version: str = "0.4.40",
) -> str:
    """Construit l'entrée JSON ``[contexte, livre]`` envoyée par mdBook."""
    config: dict[str, Any] = {
        "book": {"title": "Test", "src": "src"},
        "preprocessor": {"translator": translator_config or {}},
    }
    ctx = {
        "root": "/tmp/book",
        "config": config,
        "renderer": "html",
        "mdbook_version": mdbook_version,
        "__non_exhaustive": None,
    }
    book = {"sections": sections, "__non_exhaustive": None}
    return json.dumps([ctx, book])
