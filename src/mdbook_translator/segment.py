"""
Module de segmentation du contenu des chapitres en chunks pour la traduction.

Ce module découpe le Markdown d'un chapitre en morceaux de taille limitée
(en caractères) pour la traduction par LLM. Un bloc de code délimité par
des lignes ``` n'est jamais coupé : la coupure n'a lieu qu'entre deux lignes
de texte ordinaire situées hors de tout bloc de code.
"""

from typing import Iterator

from .config import Defaults
from .logger import get_logger

logger = get_logger(__name__)

# Marqueur d'ouverture / fermeture d'un bloc de code
FENCE_MARKER = "```"

# Taille maximale par défaut d'un chunk (en caractères)
DEFAULT_MAX_CHARS = Defaults.max_chars


def iter_lines(text: str) -> Iterator[str]:
    """
    Itère sur les lignes d'un texte, sans leur caractère de fin de ligne.

    Seul ``\\n`` sépare les lignes ; un ``\\r`` final est retiré (fichiers
    Windows). Un saut de ligne en fin de texte ne produit pas de ligne vide
    supplémentaire.
    """
    if not text:
        return

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    for line in lines:
        if line.endswith("\r"):
            line = line[:-1]
        yield line


class Segmentator:
    """
    Segmente le contenu d'un chapitre en chunks de taille limitée.

    Règles de découpage, ligne par ligne :
    - Une ligne vide ajoute ``\\n\\n`` au tampon ; ce n'est jamais un point de coupure.
    - Une ligne commençant par ``` est ajoutée au tampon et bascule l'état
      "dans un bloc de code" ; ce n'est jamais un point de coupure.
    - Une autre ligne est ajoutée si l'on est dans un bloc de code ou si le
      tampon reste sous ``max_chars`` ; sinon le tampon est émis comme chunk
      et un nouveau tampon commence par cette ligne.

    Un bloc de code non refermé désactive toute coupure jusqu'à la fin du texte.

    Attributes:
        max_chars: Taille au-delà de laquelle un chunk est émis

    Example:
        >>> segmentator = Segmentator(max_chars=4000)
        >>> for chunk in segmentator.split(chapter.content):
        ...     translated = llm.translate(chunk, "French")
    """

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS) -> None:
        if max_chars <= 0:
            raise ValueError(f"max_chars doit être positif, reçu : {max_chars}")
        self.max_chars = max_chars

    def split(self, text: str) -> Iterator[str]:
        """
        Génère les chunks d'un texte, dans l'ordre.

        Args:
            text: Contenu Markdown du chapitre

        Yields:
            Chunks non vides ; aucun pour un texte vide
        """
        buffer: list[str] = []
        buffer_len = 0
        in_code = False

        for line in iter_lines(text):
            if not line:
                buffer.append("\n\n")
                buffer_len += 2
                continue

            if line.startswith(FENCE_MARKER):
                buffer.append(line + "\n")
                buffer_len += len(line) + 1
                in_code = not in_code
                continue

            if in_code or buffer_len + len(line) < self.max_chars:
                buffer.append(line + "\n")
                buffer_len += len(line) + 1
            else:
                # Une ligne seule plus longue que max_chars ne produit pas de chunk vide
                if buffer:
                    yield "".join(buffer)
                buffer = [line + "\n"]
                buffer_len = len(line) + 1

        if in_code:
            logger.debug("⚠️ Bloc de code non refermé : fin du texte atteinte sans ```")

        if buffer:
            yield "".join(buffer)


def split_into_chunks(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> list[str]:
    """Découpe ``text`` et retourne la liste complète des chunks."""
    return list(Segmentator(max_chars).split(text))
