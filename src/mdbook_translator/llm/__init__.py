"""
Client LLM et rendu des prompts.

Exports publics :
    - LLM : Client de traduction (API compatible OpenAI)
    - TemplateRenderer : Rendu des templates Jinja2 des prompts
    - get_api_key : Lecture de la clé API depuis l'environnement
"""

from .client import LLM, get_api_key, preview
from .template_renderers import TemplateRenderer

__all__ = [
    "LLM",
    "TemplateRenderer",
    "get_api_key",
    "preview",
]
