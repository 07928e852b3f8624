"""
Renderers encapsulés pour les templates Jinja2 avec typage fort.

Les templates sont livrés avec le paquet (``llm/templates``).
"""

from jinja2 import Environment, PackageLoader, select_autoescape

from ..config import TemplateNames
from .template_params import SystemParams, TranslateParams


class TemplateRenderer:
    """
    Encapsule le rendu des templates de prompt.

    Example:
        >>> renderer = TemplateRenderer()
        >>> system = renderer.render_system()
        >>> user = renderer.render_translate("French", "# Hello")
    """

    def __init__(self):
        # Le Markdown ne doit jamais être échappé : autoescape limité au HTML/XML
        self.env = Environment(
            loader=PackageLoader("mdbook_translator.llm", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render_prompt(self, template_name: str, **kwargs) -> str:
        """Rend un template Jinja2 avec les variables données."""
        template = self.env.get_template(template_name)
        return template.render(**kwargs)

    def render_system(self) -> str:
        """Rend le prompt système (rôle de traducteur technique)."""
        params: SystemParams = {}
        return self.render_prompt(TemplateNames.System_Template, **params)

    def render_translate(self, target_language: str, text: str) -> str:
        """
        Rend le message utilisateur demandant la traduction du chunk.

        Args:
            target_language: Nom de la langue cible, inséré tel quel
            text: Chunk à traduire
        """
        params: TranslateParams = {
            "target_language": target_language,
            "text": text,
        }
        return self.render_prompt(TemplateNames.Translate_Template, **params)
