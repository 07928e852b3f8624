"""
Configuration du préprocesseur mdbook-translator.

Deux niveaux de configuration coexistent :
- Les constantes globales (niveaux de log, noms de templates, valeurs par défaut),
  exposées sous forme de singletons verrouillables.
- Les réglages d'une exécution (``TranslatorSettings``), lus une seule fois
  depuis la section ``[preprocessor.translator]`` du ``book.toml`` transmise
  par mdBook, puis passés tels quels au traducteur (immuables).
"""

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from .errors import ConfigError

if TYPE_CHECKING:
    from .protocol import PreprocessorContext


class ConfigBase:
    # Attribut de classe pour le singleton
    _instance = None
    _locked: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def lock(self):
        if not self._locked:
            self._locked = True

    def __setattr__(self, name, value):
        if getattr(self, "_locked", False):
            raise AttributeError("Configuration is locked")
        super().__setattr__(name, value)


class TemplateNames(ConfigBase):
    System_Template: str = "system.jinja"
    Translate_Template: str = "translate.jinja"


class Logger_Level(ConfigBase):
    level: int = logging.DEBUG
    # La console est stderr : stdout transporte le livre vers mdBook
    console_level: int = logging.INFO
    file_level: int = logging.DEBUG


class Defaults(ConfigBase):
    preprocessor_name: str = "translator"
    language: str = "Chinese"
    model: str = "deepseek-chat"
    api_url: str = "https://api.deepseek.com/v1"
    cache_file: str = "deepseek_cache.json"
    max_chars: int = 4000
    timeout: float = 600.0
    api_key_env: str = "DEEPSEEK_API_KEY"
    api_url_env: str = "DEEPSEEK_URL"
    log_dir_env: str = "MDBOOK_TRANSLATOR_LOG_DIR"
    log_dir: str = "logs"


def lock_config():
    """Verrouille la configuration pour empêcher les modifications ultérieures."""
    Logger_Level().lock()
    TemplateNames().lock()
    Defaults().lock()


@dataclass(frozen=True)
class TranslatorSettings:
    """
    Réglages d'une exécution du traducteur.

    Attributes:
        language: Nom de la langue cible, inséré tel quel dans le prompt
        prompt: Instruction supplémentaire envoyée après le texte (optionnelle)
        proxy: URL du proxy HTTP pour joindre l'API (optionnelle)
        model: Identifiant du modèle demandé à l'API
        api_url: URL de base de l'API compatible OpenAI
        cache_file: Chemin du fichier de cache JSON
        max_chars: Taille maximale (en caractères) d'un chunk hors bloc de code
    """

    language: str = Defaults.language
    prompt: Optional[str] = None
    proxy: Optional[str] = None
    model: str = Defaults.model
    api_url: str = Defaults.api_url
    cache_file: str = Defaults.cache_file
    max_chars: int = Defaults.max_chars

    @classmethod
    def from_context(cls, ctx: "PreprocessorContext") -> "TranslatorSettings":
        """Construit les réglages depuis le contexte transmis par mdBook."""
        return cls.from_table(
            ctx.preprocessor_config(Defaults.preprocessor_name),
            env_api_url=os.getenv(Defaults.api_url_env),
        )

    @classmethod
    def from_table(
        cls,
        table: dict[str, Any],
        env_api_url: Optional[str] = None,
    ) -> "TranslatorSettings":
        """
        Construit les réglages depuis la table ``[preprocessor.translator]``.

        Les chaînes vides sont ignorées (la valeur par défaut est conservée).
        ``env_api_url`` (variable ``DEEPSEEK_URL``) remplace l'URL par défaut,
        mais une clé ``api-url`` explicite reste prioritaire.

        Raises:
            ConfigError: Si une option a un type inattendu
        """
        values: dict[str, Any] = {}

        language = _read_str(table, "language")
        if language:
            values["language"] = language

        prompt = _read_str(table, "prompt")
        if prompt:
            values["prompt"] = prompt

        proxy = _read_str(table, "proxy")
        if proxy:
            values["proxy"] = proxy

        model = _read_str(table, "model")
        if model:
            values["model"] = model

        api_url = _read_str(table, "api-url") or env_api_url
        if api_url:
            values["api_url"] = api_url

        cache_file = _read_str(table, "cache-file")
        if cache_file:
            values["cache_file"] = cache_file

        max_chars = table.get("max-chars")
        if max_chars is not None:
            # bool est une sous-classe de int
            if isinstance(max_chars, bool) or not isinstance(max_chars, int):
                raise ConfigError(
                    f"L'option 'max-chars' doit être un entier, reçu : {max_chars!r}"
                )
            if max_chars <= 0:
                raise ConfigError(
                    f"L'option 'max-chars' doit être positive, reçu : {max_chars}"
                )
            values["max_chars"] = max_chars

        return cls(**values)


def _read_str(table: dict[str, Any], key: str) -> Optional[str]:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(
            f"L'option '{key}' doit être une chaîne de caractères, reçu : {value!r}"
        )
    return value
