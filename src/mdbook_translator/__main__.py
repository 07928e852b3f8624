"""
Point d'entrée du préprocesseur mdBook.

Usage (appelé par mdBook) :
    mdbook-translator supports <renderer>   # code de sortie 0 ou 1
    mdbook-translator < input.json > output.json

Configuration dans book.toml :

    [preprocessor.translator]
    command = "mdbook-translator"
    language = "French"          # langue cible (défaut : Chinese)
    prompt = "Tutoyez le lecteur" # instruction supplémentaire (optionnelle)
    proxy = "http://127.0.0.1:8099"  # proxy HTTP (optionnel)

La clé API est lue dans la variable d'environnement DEEPSEEK_API_KEY
(ou dans un fichier .env).
"""

import argparse
import sys
from typing import IO, Callable, Optional, Sequence

from .book import Book
from .config import Defaults, TranslatorSettings, lock_config
from .errors import TranslatorError
from .logger import get_logger
from .protocol import (
    check_version,
    parse_input,
    supports_renderer,
    write_output,
)
from .translation import BookTranslator

logger = get_logger(__name__)

TranslatorFactory = Callable[[TranslatorSettings], BookTranslator]


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdbook-translator",
        description=(
            "Préprocesseur mdBook qui traduit automatiquement les chapitres "
            "Markdown via l'API DeepSeek."
        ),
    )
    subparsers = parser.add_subparsers(dest="command")
    supports = subparsers.add_parser(
        "supports",
        help="Vérifie si un renderer est supporté par ce préprocesseur",
    )
    supports.add_argument("renderer")
    return parser


def handle_supports(renderer: str) -> int:
    """Retourne le code de sortie signalant le support du renderer."""
    return 0 if supports_renderer(renderer) else 1


def handle_preprocessing(
    stdin: IO[str],
    stdout: IO[str],
    factory: TranslatorFactory = BookTranslator.from_settings,
) -> Book:
    """
    Lit le livre sur ``stdin``, le traduit et l'écrit sur ``stdout``.

    Rien n'est écrit sur ``stdout`` si une erreur survient.

    Raises:
        TranslatorError: Erreur fatale (configuration, réseau, réponse API)
    """
    ctx, book = parse_input(stdin)
    check_version(ctx, Defaults.preprocessor_name)

    settings = TranslatorSettings.from_context(ctx)
    logger.info(f"🎯 Langue cible : {settings.language}")
    if settings.prompt:
        logger.info(f"📝 Prompt supplémentaire : {settings.prompt}")

    translator = factory(settings)
    translated = translator.run(book)

    write_output(translated, stdout)
    return translated


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Point d'entrée principal du programme."""
    lock_config()
    args = make_parser().parse_args(argv)

    if args.command == "supports":
        sys.exit(handle_supports(args.renderer))

    try:
        handle_preprocessing(sys.stdin, sys.stdout)
    except KeyboardInterrupt:
        logger.error("\n❌ Traduction interrompue par l'utilisateur")
        sys.exit(130)
    except TranslatorError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        logger.debug("Détails de l'erreur", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
