"""
Préprocesseur mdBook de traduction via LLM.

mdbook-translator s'insère dans la chaîne de construction d'un livre mdBook
et traduit le contenu Markdown de chaque chapitre avec une API compatible
OpenAI (DeepSeek par défaut).

Le processus de traduction :
1. Lit le contexte et le livre envoyés par mdBook sur stdin
2. Segmente chaque chapitre en chunks sans couper les blocs de code
3. Traduit chaque chunk via l'API (avec cache sur disque par empreinte SHA-256)
4. Renvoie le livre traduit à mdBook sur stdout

Organisation du package :
- book.py : Modèle de l'arbre des chapitres (JSON mdBook)
- protocol.py : Protocole préprocesseur (stdin/stdout, supports)
- segment.py : Segmentation du contenu en chunks
- store.py : Cache persistant des traductions (JSON)
- llm/ : Client LLM et templates Jinja2 des prompts
- translation/ : Parcours de l'arbre et orchestration
- config.py, errors.py, logger.py : Configuration, exceptions et logs

Usage minimal :
    >>> from mdbook_translator import BookTranslator, LLM, Store, TranslatorSettings
    >>>
    >>> settings = TranslatorSettings(language="French")
    >>> llm = LLM(api_key="sk-...")  # ou DEEPSEEK_API_KEY dans l'environnement
    >>> translator = BookTranslator(llm, Store(settings.cache_file), settings)
    >>> translator.run(book)

Version: 0.1.0
"""

from .book import Book, Chapter, PartTitle, Separator
from .config import TranslatorSettings
from .errors import (
    CacheCorruptionError,
    ConfigError,
    ProtocolError,
    TranslatorError,
    TransportError,
)
from .llm import LLM
from .segment import FENCE_MARKER, DEFAULT_MAX_CHARS, Segmentator, split_into_chunks
from .store import Store, hash_key
from .translation import BookTranslator

# Version du package
__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Arbre du livre
    "Book",
    "Chapter",
    "PartTitle",
    "Separator",
    # Traduction
    "BookTranslator",
    "LLM",
    "TranslatorSettings",
    # Segmentation et cache
    "Segmentator",
    "split_into_chunks",
    "Store",
    "hash_key",
    # Constantes
    "FENCE_MARKER",
    "DEFAULT_MAX_CHARS",
    # Exceptions
    "TranslatorError",
    "ConfigError",
    "TransportError",
    "ProtocolError",
    "CacheCorruptionError",
]
