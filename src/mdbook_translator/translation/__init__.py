"""
Module de traduction des livres mdBook.

Organisation du module :
- translator.py : Parcours de l'arbre des chapitres et orchestration

Usage :
    >>> from mdbook_translator.translation import BookTranslator
    >>> translator = BookTranslator.from_settings(TranslatorSettings.from_context(ctx))
    >>> book = translator.run(book)
"""

from .translator import BookTranslator

__all__ = [
    "BookTranslator",
]
