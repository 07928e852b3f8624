"""
Module de configuration du logging pour mdbook-translator.

Ce module fournit une fonction centralisée pour configurer le système de logging
avec sortie console et fichier. Tous les modules de l'application peuvent utiliser
cette fonction pour obtenir un logger configuré de manière cohérente.

Fonctionnalités :
- Console sur stderr uniquement (stdout est réservé au livre renvoyé à mdBook)
- Regroupement des logs par session d'exécution dans logs/run_YYYYMMDD_HHMMSS/
- Création différée du répertoire et des fichiers de log (évite les fichiers vides)
- Nommage contextuel des fichiers (llm_chunk_0001.log, translation.log, etc.)
"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from tqdm import tqdm

from .config import Defaults, Logger_Level


# ============================================================
# 🔹 Gestionnaire de session de logs
# ============================================================


class LogSession:
    """
    Gestionnaire singleton pour regrouper tous les logs d'une exécution.

    Calcule un répertoire unique par session : <base>/run_YYYYMMDD_HHMMSS/
    Le répertoire de base vaut ``logs`` ou la valeur de la variable
    d'environnement ``MDBOOK_TRANSLATOR_LOG_DIR``. Il n'est créé qu'à
    la première écriture.
    """

    _instance: Optional["LogSession"] = None
    _session_dir: Optional[Path] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        # Éviter la ré-initialisation
        if LogSession._session_dir is not None:
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base_dir = Path(os.getenv(Defaults.log_dir_env) or Defaults.log_dir)
        LogSession._session_dir = base_dir / f"run_{timestamp}"

    @classmethod
    def get_session_dir(cls) -> Path:
        """Retourne le répertoire de la session en cours (non créé)."""
        if cls._session_dir is None:
            cls()  # Initialiser si pas encore fait
        assert cls._session_dir is not None
        return cls._session_dir

    @classmethod
    def reset(cls):
        """Reset la session (utile pour les tests)."""
        cls._instance = None
        cls._session_dir = None


# ============================================================
# 🔹 Handlers de logging
# ============================================================


class TqdmLoggingHandler(logging.Handler):
    """
    Handler de logging compatible avec tqdm.

    Utilise tqdm.write() sur stderr pour afficher les logs sans perturber
    la barre de progression.
    """

    def __init__(self, level=logging.NOTSET):
        super().__init__(level)

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
        except Exception:
            self.handleError(record)


class LazyFileHandler(logging.Handler):
    """
    Handler qui crée le fichier de log seulement au premier message.

    Si aucun chemin n'est fourni, le fichier est placé dans le répertoire de
    session, résolu lui aussi au premier message.
    """

    def __init__(
        self,
        filename: Optional[Path] = None,
        mode: str = "a",
        encoding: str = "utf-8",
        level: int = logging.NOTSET,
        session_filename: str = "translation.log",
    ):
        super().__init__(level)
        self.filename = filename
        self.session_filename = session_filename
        self.mode = mode
        self.encoding = encoding
        self._handler: Optional[logging.FileHandler] = None

    def _ensure_handler(self):
        """Crée le FileHandler sous-jacent si pas encore fait."""
        if self._handler is None:
            if self.filename is None:
                self.filename = LogSession.get_session_dir() / self.session_filename
            self.filename.parent.mkdir(parents=True, exist_ok=True)
            self._handler = logging.FileHandler(
                self.filename,
                mode=self.mode,
                encoding=self.encoding,
            )
            if self.formatter:
                self._handler.setFormatter(self.formatter)

    def emit(self, record):
        """Émet un log, en créant le fichier si nécessaire."""
        try:
            self._ensure_handler()
            if self._handler:
                self._handler.emit(record)
        except Exception:
            self.handleError(record)

    def close(self):
        """Ferme le handler sous-jacent si existant."""
        if self._handler:
            self._handler.close()
        super().close()


# ============================================================
# 🔹 Configuration des loggers
# ============================================================


def setup_logger(
    name: str,
    log_dir: Optional[str] = None,
    level: int = Logger_Level.level,
    console_level: int = Logger_Level.console_level,
    file_level: int = Logger_Level.file_level,
    log_filename: str = "translation.log",
) -> logging.Logger:
    """
    Configure un logger avec sortie console (stderr) et fichier.

    Args:
        name: Nom du logger (généralement __name__ du module)
        log_dir: Répertoire explicite (None = répertoire de session, résolu au premier log)
        level: Niveau de logging global du logger
        console_level: Niveau de logging pour la sortie console
        file_level: Niveau de logging pour le fichier
        log_filename: Nom du fichier de log (défaut: "translation.log")

    Returns:
        Logger configuré avec handlers console et fichier

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Traduction démarrée")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Éviter d'ajouter des handlers multiples si déjà configuré
    if logger.handlers:
        return logger

    # Les messages ne remontent pas au logger racine (qui pourrait écrire sur stdout)
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_dir is None:
        file_handler = LazyFileHandler(session_filename=log_filename)
    else:
        file_handler = LazyFileHandler(filename=Path(log_dir) / log_filename)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str, log_filename: Optional[str] = None) -> logging.Logger:
    """
    Récupère un logger existant ou en crée un nouveau avec la configuration par défaut.

    Args:
        name: Nom du logger (généralement __name__ du module)
        log_filename: Nom optionnel du fichier de log (None = "translation.log")

    Returns:
        Logger configuré
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        filename = log_filename or "translation.log"
        return setup_logger(name, log_filename=filename)

    return logger


def get_session_log_path(filename: str) -> Path:
    """
    Retourne le chemin complet d'un fichier de log dans le répertoire de session.

    Le répertoire de session est créé si nécessaire.

    Args:
        filename: Nom du fichier de log (ex: "llm_chunk_0042.log")

    Returns:
        Chemin complet : logs/run_YYYYMMDD_HHMMSS/filename
    """
    session_dir = LogSession.get_session_dir()
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir / filename
