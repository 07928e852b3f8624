import datetime
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from openai import (
    OpenAI,
    OpenAIError,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    DefaultHttpxClient,
)
from openai.types.chat import ChatCompletionMessageParam

from ..config import Defaults
from ..errors import ConfigError, ProtocolError, TransportError
from ..logger import get_logger, get_session_log_path
from .template_renderers import TemplateRenderer

logger = get_logger(__name__)

# Longueur des aperçus affichés dans les logs console
PREVIEW_CHARS = 100


def get_api_key(env_var: str = Defaults.api_key_env) -> str:
    """
    Lit la clé API depuis l'environnement (après chargement du fichier .env).

    Raises:
        ConfigError: Si la variable n'est pas définie ou vide
    """
    # mdBook lance le préprocesseur depuis la racine du livre
    load_dotenv(find_dotenv(usecwd=True))

    api_key = os.getenv(env_var)
    if not api_key:
        raise ConfigError(
            f"La clé API n'est pas définie.\n"
            f"Pour configurer :\n"
            f"  1. Obtenez une clé API sur https://platform.deepseek.com/api_keys\n"
            f"  2. Exportez-la : export {env_var}=sk-votre-cle\n"
            f"     (ou ajoutez-la dans un fichier .env à la racine du livre)"
        )
    return api_key


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Tronque ``text`` à ``limit`` caractères pour l'affichage."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class LLM:
    """
    Client de traduction pour une API compatible OpenAI (DeepSeek par défaut).

    Chaque appel à translate() émet exactement une requête, sans retry :
    un échec réseau ou une réponse inexploitable interrompt l'exécution.

    Attributes:
        model_name: Identifiant du modèle
        url: URL de base de l'API
        proxy: Proxy HTTP utilisé pour toutes les requêtes (optionnel)
        timeout: Délai maximal d'une requête, en secondes
    """

    def __init__(
        self,
        model_name: str = Defaults.model,
        url: str = Defaults.api_url,
        api_key: Optional[str] = None,
        proxy: Optional[str] = None,
        timeout: float = Defaults.timeout,
    ):
        self.model_name = model_name
        self.url = url
        self.proxy = proxy
        self.timeout = timeout
        self.api_key = api_key or get_api_key()
        self.renderer = TemplateRenderer()

        client_options: dict[str, Any] = {
            "api_key": self.api_key,
            "base_url": url,
            "timeout": timeout,
            "max_retries": 0,
        }
        if proxy:
            client_options["http_client"] = DefaultHttpxClient(proxy=proxy)
        self.client = OpenAI(**client_options)

        # Compteur pour nommage unique des logs
        self._log_counter = 0

    # -----------------------------------
    # 🔹 Construction des messages
    # -----------------------------------
    def build_messages(
        self,
        text: str,
        target_language: str,
        extra_prompt: Optional[str] = None,
    ) -> list[ChatCompletionMessageParam]:
        """
        Construit la liste de messages envoyée à l'API.

        1. Message système : rôle de traducteur technique
        2. Message utilisateur : langue cible + chunk
        3. Message utilisateur optionnel : instruction supplémentaire, si non vide
        """
        messages: list[ChatCompletionMessageParam] = [
            {"role": "system", "content": self.renderer.render_system()},
            {
                "role": "user",
                "content": self.renderer.render_translate(target_language, text),
            },
        ]
        if extra_prompt:
            messages.append({"role": "user", "content": extra_prompt})
        return messages

    # -----------------------------------
    # 🔹 Gestion du log
    # -----------------------------------
    def _create_log(
        self,
        messages: list[ChatCompletionMessageParam],
        context: Optional[str] = None,
    ) -> Path:
        """
        Écrit l'en-tête du log d'une requête et retourne le chemin du fichier.

        Args:
            messages: Messages envoyés à l'API
            context: Contexte optionnel pour nommer le fichier (ex: "chunk_0042")
        """
        timestamp = datetime.datetime.now().isoformat().replace(":", "-")

        self._log_counter += 1
        if context:
            filename = f"llm_{context}_{self._log_counter:04d}_{timestamp}.log"
        else:
            filename = f"llm_{self._log_counter:04d}_{timestamp}.log"

        log_path = get_session_log_path(filename)

        parts = [
            "=== LLM REQUEST LOG ===\n",
            f"Timestamp : {timestamp}\n",
            f"Model     : {self.model_name}\n",
            f"Context   : {context or 'N/A'}\n",
            f"{'-'*40}\n\n",
        ]
        for message in messages:
            parts.append(f"--- {str(message['role']).upper()} ---\n{message.get('content')}\n\n")
        parts.append("--- RESPONSE ---\n")

        with open(log_path, "w", encoding="utf-8") as f:
            f.write("".join(parts))
        return log_path

    def _append_response(self, log_path: Path, response: str):
        """Ajoute la réponse à la fin du log existant."""
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(response.strip() + "\n")

    # -----------------------------------
    # 🔹 Requête de traduction
    # -----------------------------------
    def translate(
        self,
        text: str,
        target_language: str,
        extra_prompt: Optional[str] = None,
        context: Optional[str] = None,
    ) -> str:
        """
        Traduit un chunk en une seule requête.

        Args:
            text: Chunk à traduire
            target_language: Nom de la langue cible
            extra_prompt: Instruction supplémentaire (ajoutée si non vide)
            context: Contexte optionnel pour nommer le fichier de log

        Returns:
            Le texte de la première complétion, ou "" si la réponse n'en contient pas

        Raises:
            TransportError: API injoignable ou délai dépassé
            ProtocolError: Réponse HTTP en erreur ou enveloppe inexploitable
        """
        messages = self.build_messages(text, target_language, extra_prompt)
        log_path = self._create_log(messages, context)

        logger.info("⏳ Requête à l'API de traduction, veuillez patienter...")
        try:
            resp = self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
            )
        except APITimeoutError as e:
            self._append_response(log_path, f"[ERREUR: Timeout] {e}")
            raise TransportError(
                f"Délai dépassé ({self.timeout:.0f}s) en attendant {self.url}", url=self.url
            ) from e
        except APIConnectionError as e:
            self._append_response(log_path, f"[ERREUR: Connexion] {e}")
            raise TransportError(
                f"Impossible de joindre {self.url} : {e}", url=self.url
            ) from e
        except APIStatusError as e:
            self._append_response(log_path, f"[ERREUR HTTP {e.status_code}] {e}")
            raise ProtocolError(
                f"L'API a répondu HTTP {e.status_code} : {e.message}",
                status_code=e.status_code,
            ) from e
        except (OpenAIError, ValueError) as e:
            self._append_response(log_path, f"[ERREUR: Réponse invalide] {e}")
            raise ProtocolError(f"Réponse de l'API illisible : {e}") from e

        if isinstance(resp, (str, bytes)) or not hasattr(resp, "choices"):
            self._append_response(log_path, f"[ERREUR: Réponse invalide] {resp!r}")
            raise ProtocolError(
                f"Réponse inattendue de l'API (pas d'enveloppe de complétion) : "
                f"{preview(repr(resp))}"
            )

        translated = self._extract_content(resp)
        if translated:
            logger.info(f"✅ Requête réussie, traduction : {preview(translated)!r}")
        else:
            logger.warning("⚠️ Réponse sans contenu : le chunk ne sera pas mis en cache")

        self._append_response(log_path, translated or "Result Empty")
        return translated

    @staticmethod
    def _extract_content(resp: Any) -> str:
        """Extrait ``choices[0].message.content`` ; "" si un élément manque."""
        choices = resp.choices
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        return content if isinstance(content, str) else ""
