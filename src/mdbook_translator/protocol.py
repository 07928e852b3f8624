"""
Protocole préprocesseur de mdBook.

mdBook lance le préprocesseur de deux façons :
- ``mdbook-translator supports <renderer>`` : le code de sortie indique si le
  renderer est supporté (0) ou non (1), sans rien écrire ;
- ``mdbook-translator`` : un tableau JSON ``[contexte, livre]`` est lu sur
  stdin, le livre modifié doit être écrit en JSON sur stdout.
"""

import json
import re
from dataclasses import dataclass, field
from typing import IO, Any

from .book import Book
from .errors import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

# Série de versions de mdBook pour laquelle le format JSON est connu
SUPPORTED_MDBOOK_VERSION = (0, 4)

# Renderer utilisé par mdBook dans ses tests pour signaler un refus
UNSUPPORTED_RENDERER = "not-supported"

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass
class PreprocessorContext:
    """
    Contexte d'exécution fourni par mdBook.

    Attributes:
        root: Répertoire racine du livre
        config: Contenu de book.toml, sous forme de dictionnaire
        renderer: Nom du renderer en cours (ex: "html")
        mdbook_version: Version de mdBook appelante
        extra: Champs JSON non reconnus
    """

    root: str
    config: dict[str, Any]
    renderer: str
    mdbook_version: str
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PreprocessorContext":
        known = ("root", "config", "renderer", "mdbook_version")
        missing = [key for key in known if key not in data]
        if missing:
            raise ConfigError(f"Contexte mdBook incomplet, champs manquants : {missing}")
        if not isinstance(data["config"], dict):
            raise ConfigError("Le champ 'config' du contexte mdBook doit être un objet")
        return cls(
            root=str(data["root"]),
            config=data["config"],
            renderer=str(data["renderer"]),
            mdbook_version=str(data["mdbook_version"]),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def preprocessor_config(self, name: str) -> dict[str, Any]:
        """Retourne la table ``[preprocessor.<name>]`` (vide si absente)."""
        preprocessors = self.config.get("preprocessor") or {}
        table = preprocessors.get(name) if isinstance(preprocessors, dict) else None
        return table if isinstance(table, dict) else {}


def parse_version(version: str) -> tuple[int, int, int]:
    """
    Analyse une version sémantique « X.Y.Z[-pre][+build] ».

    Raises:
        ConfigError: Si la version est mal formée
    """
    match = _SEMVER_RE.match(version.strip())
    if match is None:
        raise ConfigError(f"Version de mdBook invalide : {version!r}")
    return int(match["major"]), int(match["minor"]), int(match["patch"])


def check_version(ctx: PreprocessorContext, name: str = "translator") -> bool:
    """
    Vérifie la compatibilité avec la version de mdBook appelante.

    Une version d'une autre série ne produit qu'un avertissement, comme le
    font les préprocesseurs mdBook.

    Returns:
        True si la version appartient à la série supportée

    Raises:
        ConfigError: Si la version transmise est mal formée
    """
    major, minor, _ = parse_version(ctx.mdbook_version)
    if (major, minor) == SUPPORTED_MDBOOK_VERSION:
        return True

    expected = ".".join(str(n) for n in SUPPORTED_MDBOOK_VERSION)
    logger.warning(
        f"⚠️ Le plugin {name} a été conçu pour mdBook {expected}.x, "
        f"mais il est appelé par la version {ctx.mdbook_version}"
    )
    return False


def parse_input(stream: IO[str]) -> tuple[PreprocessorContext, Book]:
    """
    Lit le tableau JSON ``[contexte, livre]`` envoyé par mdBook.

    Raises:
        ConfigError: Si l'entrée n'est pas du JSON ou n'a pas la forme attendue
    """
    try:
        payload = json.load(stream)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Entrée mdBook illisible (JSON invalide) : {e}") from e

    if not isinstance(payload, list) or len(payload) != 2:
        raise ConfigError("L'entrée mdBook doit être un tableau JSON [contexte, livre]")

    raw_ctx, raw_book = payload
    if not isinstance(raw_ctx, dict) or not isinstance(raw_book, dict):
        raise ConfigError("Le contexte et le livre doivent être des objets JSON")

    ctx = PreprocessorContext.from_dict(raw_ctx)
    try:
        book = Book.from_dict(raw_book)
    except ValueError as e:
        raise ConfigError(f"Livre mdBook invalide : {e}") from e

    return ctx, book


def write_output(book: Book, stream: IO[str]) -> None:
    """Écrit le livre en JSON sur ``stream`` (stdout pour mdBook)."""
    json.dump(book.to_dict(), stream, ensure_ascii=False)
    stream.flush()


def supports_renderer(renderer: str) -> bool:
    """Le contenu traduit reste du Markdown : tous les renderers sont acceptés."""
    return renderer != UNSUPPORTED_RENDERER
