"""
Exceptions du préprocesseur.

Hiérarchie :
    TranslatorError
    ├── ConfigError          : clé API absente, contexte mdBook invalide (fatal)
    ├── TransportError       : API injoignable ou délai dépassé (fatal)
    ├── ProtocolError        : réponse de l'API inexploitable (fatal)
    └── CacheCorruptionError : cache illisible (toujours récupéré par le Store)
"""


class TranslatorError(Exception):
    """Classe de base de toutes les erreurs du préprocesseur."""


class ConfigError(TranslatorError):
    """Configuration ou négociation avec mdBook invalide."""


class TransportError(TranslatorError):
    """
    Exception levée quand l'API de traduction ne peut pas être jointe.

    Attributes:
        url: URL de base de l'API visée
    """

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class ProtocolError(TranslatorError):
    """
    Exception levée quand la réponse de l'API n'a pas la forme attendue.

    Attributes:
        status_code: Code HTTP de la réponse, si disponible
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ProtocolError(status_code={self.status_code}, message={str(self)!r})"


class CacheCorruptionError(TranslatorError):
    """Le fichier de cache existe mais ne contient pas un objet JSON valide."""
