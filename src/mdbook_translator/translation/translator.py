"""
Orchestration de la traduction complète d'un livre mdBook.

Ce module parcourt l'arbre des chapitres et, pour chacun :
1. Segmente le contenu en chunks (sans couper les blocs de code)
2. Récupère chaque traduction depuis le cache, ou la demande au LLM
3. Reconstruit le contenu traduit dans l'ordre des chunks
4. Descend dans les sous-chapitres

Le cache est chargé une fois au début et sauvegardé une fois à la fin,
y compris quand une erreur interrompt la traduction.
"""

import sys
from typing import Optional

from tqdm import tqdm

from ..book import Book, BookItem, Chapter
from ..config import TranslatorSettings
from ..llm import LLM, preview
from ..logger import get_logger
from ..segment import FENCE_MARKER, Segmentator
from ..store import Store, hash_key

logger = get_logger(__name__)


class BookTranslator:
    """
    Traducteur d'un livre mdBook, chapitre par chapitre.

    Les chunks sont traduits strictement l'un après l'autre, dans l'ordre
    du document. Seuls les champs ``content`` des chapitres sont modifiés.

    Attributes:
        llm: Client de traduction
        store: Cache des traductions
        settings: Réglages de l'exécution (langue, prompt, taille des chunks...)
        requests_count: Nombre de requêtes envoyées à l'API pendant l'exécution
    """

    def __init__(self, llm: LLM, store: Store, settings: TranslatorSettings):
        self.llm = llm
        self.store = store
        self.settings = settings
        self.segmentator = Segmentator(settings.max_chars)
        self.requests_count = 0

    @classmethod
    def from_settings(cls, settings: TranslatorSettings) -> "BookTranslator":
        """
        Construit le traducteur (client LLM + store) depuis les réglages.

        Raises:
            ConfigError: Si la clé API n'est pas définie
        """
        llm = LLM(
            model_name=settings.model,
            url=settings.api_url,
            proxy=settings.proxy,
        )
        return cls(llm, Store(settings.cache_file), settings)

    def translate_text(self, text: str) -> str:
        """
        Traduit un chunk, en passant par le cache.

        Returns:
            La traduction (éventuellement vide si l'API n'a rien renvoyé)
        """
        key = hash_key(text, self.settings.language)
        cached = self.store.get(key)
        if cached is not None:
            logger.info(f"💾 Cache hit : {preview(cached)!r}")
            return cached

        self.requests_count += 1
        translated = self.llm.translate(
            text,
            self.settings.language,
            extra_prompt=self.settings.prompt,
            context=f"chunk_{self.requests_count:04d}",
        )
        self.store.put(key, translated)
        return translated

    def translate_chapter(self, chapter: Chapter) -> None:
        """Remplace le contenu du chapitre par sa traduction, chunk par chunk."""
        parts: list[str] = []
        for chunk in self.segmentator.split(chapter.content):
            logger.debug(f"Chunk de {len(chunk)} caractères")
            translated = self.translate_text(chunk)
            parts.append(translated)
            # Évite qu'un bloc de code fermé se colle au chunk suivant
            if translated.endswith(FENCE_MARKER):
                parts.append("\n\n")
        chapter.content = "".join(parts)

    def walk_items(self, items: list[BookItem], bar: Optional[tqdm] = None) -> None:
        """
        Traduit récursivement une liste d'éléments.

        Le contenu d'un chapitre est traduit avant ses sous-chapitres, et
        ceux-ci avant le chapitre suivant. Les autres éléments sont ignorés.
        """
        for item in items:
            if not isinstance(item, Chapter):
                continue

            logger.info(f"\n📖 Processing chapter: {item.number_label}{item.name}")
            self.translate_chapter(item)
            if bar is not None:
                bar.update(1)

            self.walk_items(item.sub_items, bar)

    def run(self, book: Book) -> Book:
        """
        Traduit tout le livre et sauvegarde le cache.

        Le cache est sauvegardé même si une erreur interrompt la traduction,
        pour ne pas refaire les chunks déjà traduits. L'erreur est propagée.

        Returns:
            Le même livre, dont les contenus ont été traduits
        """
        self.store.load()
        total = sum(1 for _ in book.iter_chapters())
        logger.info(
            f"🤖 Traduction vers {self.settings.language} "
            f"({total} chapitre(s), cache : {len(self.store)} entrée(s))"
        )

        try:
            with tqdm(
                total=total,
                desc="Traduction des chapitres",
                unit="chapitre",
                file=sys.stderr,
                disable=None,
            ) as bar:
                self.walk_items(book.sections, bar)
        except BaseException:
            # Un échec de sauvegarde ne doit pas masquer l'erreur de traduction
            try:
                self.store.save()
            except Exception as e:
                logger.error(f"❌ Échec de la sauvegarde du cache : {e}")
            raise
        finally:
            logger.info(
                f"📊 Requêtes API : {self.requests_count}, "
                f"cache hits : {self.store.hits}/{self.store.lookups}"
            )

        self.store.save()
        return book
