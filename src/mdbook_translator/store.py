"""
Store pour sauvegarder et récupérer les traductions sur disque.

Ce module fournit une classe Store pour gérer la persistance des traductions
des chunks. Les traductions sont stockées au format JSON dans un unique
fichier, avec l'empreinte SHA-256 du couple (texte source, langue cible)
comme clé et le texte traduit comme valeur.

Format de stockage:
    {"<sha256 hex>": "<texte traduit>", ...}

Cycle de vie:
    - load() une fois au démarrage (cache vide si le fichier est absent ou corrompu)
    - get() / put() en mémoire pendant la traduction
    - save() une fois à la fin, en écrasant le fichier précédent
"""

import hashlib
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .config import Defaults
from .errors import CacheCorruptionError
from .logger import get_logger

logger = get_logger(__name__)


def hash_key(text: str, language: str) -> str:
    """
    Calcule l'empreinte d'un chunk pour une langue cible donnée.

    Le hash porte sur les octets UTF-8 du texte suivis de ceux de la langue,
    ce qui permet de garder plusieurs langues dans le même cache.

    Example:
        >>> hash_key("Hello", "French") == hash_key("Hello", "French")
        True
        >>> hash_key("Hello", "French") == hash_key("Hello", "German")
        False
    """
    hasher = hashlib.sha256()
    hasher.update(text.encode("utf-8"))
    hasher.update(language.encode("utf-8"))
    return hasher.hexdigest()


class Store:
    """
    Cache persistant des traductions, adressé par empreinte de contenu.

    Le store est possédé par une seule exécution : aucun verrou n'est pris
    sur le fichier, deux exécutions simultanées s'écraseraient mutuellement.

    Attributes:
        cache_file: Chemin du fichier de cache JSON
        lookups: Nombre de recherches effectuées depuis le chargement
        hits: Nombre de recherches ayant trouvé une traduction
    """

    def __init__(self, cache_file: str | Path = Defaults.cache_file) -> None:
        self.cache_file = Path(cache_file)
        self.lookups = 0
        self.hits = 0
        self._data: dict[str, str] = {}

    def _read_cache(self) -> dict[str, str]:
        """
        Lit le fichier de cache de façon stricte.

        Returns:
            Dictionnaire {empreinte: texte_traduit}, vide si le fichier n'existe pas

        Raises:
            CacheCorruptionError: Si le fichier est illisible ou n'est pas un objet JSON
        """
        if not self.cache_file.exists():
            return {}

        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheCorruptionError(
                f"Cache illisible ({self.cache_file}) : {e}"
            ) from e

        if not isinstance(raw, dict):
            raise CacheCorruptionError(
                f"Le cache {self.cache_file} doit contenir un objet JSON, "
                f"trouvé : {type(raw).__name__}"
            )

        data: dict[str, str] = {}
        for key, value in raw.items():
            if isinstance(value, str):
                data[key] = value
            else:
                logger.warning(f"⚠️ Entrée de cache ignorée (valeur non textuelle) : {key}")
        return data

    def _backup_corrupted(self) -> None:
        """Copie le fichier corrompu en ``<nom>.backup`` avant qu'il soit écrasé."""
        backup = self.cache_file.with_name(self.cache_file.name + ".backup")
        try:
            shutil.copyfile(self.cache_file, backup)
            logger.warning(f"💾 Copie du cache corrompu : {backup}")
        except OSError as e:
            logger.warning(f"⚠️ Impossible de sauvegarder le cache corrompu : {e}")

    def load(self) -> dict[str, str]:
        """
        Charge le cache depuis le disque.

        Un cache absent ou corrompu n'est jamais fatal : l'exécution repart
        d'un cache vide (le fichier corrompu est copié en .backup).

        Returns:
            Le dictionnaire en mémoire {empreinte: texte_traduit}
        """
        try:
            self._data = self._read_cache()
        except CacheCorruptionError as e:
            logger.warning(f"⚠️ {e} - démarrage avec un cache vide")
            self._backup_corrupted()
            self._data = {}

        self.lookups = 0
        self.hits = 0
        logger.debug(f"Cache chargé : {len(self._data)} entrée(s) depuis {self.cache_file}")
        return self._data

    def get(self, key: str) -> Optional[str]:
        """
        Récupère une traduction en mémoire.

        Returns:
            Le texte traduit si trouvé, None sinon
        """
        self.lookups += 1
        translated = self._data.get(key)
        if translated is not None:
            self.hits += 1
        return translated

    def put(self, key: str, translated_text: str) -> None:
        """
        Enregistre une traduction en mémoire.

        Une traduction vide n'est jamais enregistrée : un échec transitoire
        qui a produit une chaîne vide sera retenté à la prochaine exécution.
        """
        if not translated_text:
            return
        self._data[key] = translated_text

    def save(self) -> None:
        """
        Écrit le cache complet sur disque en écrasant le fichier existant.

        L'écriture passe par un fichier temporaire du même répertoire, renommé
        ensuite sur le fichier de cache.
        """
        directory = self.cache_file.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.cache_file.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_name, self.cache_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Cache sauvegardé : {len(self._data)} entrée(s) dans {self.cache_file}")

    @property
    def data(self) -> dict[str, str]:
        """Le dictionnaire en mémoire (partagé, non copié)."""
        return self._data

    def __len__(self) -> int:
        return len(self._data)
