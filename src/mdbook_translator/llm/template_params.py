"""
Définitions des paramètres typés pour les templates Jinja2.

Ce module centralise les TypedDicts utilisées pour le rendu des templates,
permettant une vérification de type stricte et une documentation claire
des paramètres requis pour chaque template.
"""

from typing import TypedDict


class SystemParams(TypedDict):
    """Paramètres pour system.jinja (aucun pour l'instant)."""


class TranslateParams(TypedDict):
    """
    Paramètres pour translate.jinja (message utilisateur principal).

    Attributes:
        target_language: Nom de la langue cible (ex: "Chinese", "French")
        text: Chunk Markdown à traduire
    """

    target_language: str
    text: str
