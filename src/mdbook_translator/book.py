"""
Modèle de l'arbre de document transmis par mdBook.

Un livre est une suite ordonnée d'éléments (BookItem) :
- Chapter : porte un contenu Markdown traduisible et ses sous-chapitres
- Separator / PartTitle : éléments opaques, renvoyés tels quels

Format JSON (mdBook 0.4, énumération « externally tagged ») :

    {
      "sections": [
        {"Chapter": {"name": "...", "content": "...", "number": [1],
                     "sub_items": [...], "path": "intro.md",
                     "source_path": "intro.md", "parent_names": []}},
        "Separator",
        {"PartTitle": "Partie II"}
      ],
      "__non_exhaustive": null
    }

Les champs inconnus sont conservés dans ``extra`` et réémis à l'identique,
de sorte qu'un aller-retour from_dict() / to_dict() ne perd rien.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

CHAPTER_FIELDS = ("name", "content", "number", "sub_items", "path", "source_path", "parent_names")


@dataclass
class Chapter:
    """
    Chapitre du livre.

    Attributes:
        name: Titre affiché du chapitre
        content: Contenu Markdown (seul champ modifié par la traduction)
        number: Numérotation hiérarchique (ex: [1, 2] pour « 1.2. »), None si absente
        sub_items: Sous-éléments possédés par ce chapitre, dans l'ordre
        path: Chemin de sortie du chapitre (None pour un brouillon)
        source_path: Chemin du fichier source
        parent_names: Titres des chapitres parents
        extra: Champs JSON non reconnus, conservés pour la sérialisation
    """

    name: str
    content: str = ""
    number: Optional[list[int]] = None
    sub_items: list["BookItem"] = field(default_factory=list)
    path: Optional[str] = None
    source_path: Optional[str] = None
    parent_names: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def number_label(self) -> str:
        """Numéro affichable (« 1.2. »), chaîne vide sans numérotation."""
        if not self.number:
            return ""
        return "".join(f"{n}." for n in self.number)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Chapter":
        if not isinstance(data, dict):
            raise ValueError(f"Chapitre invalide (objet attendu) : {data!r:.100}")
        if not isinstance(data.get("name"), str):
            raise ValueError(f"Chapitre sans nom valide : {data!r:.100}")
        content = data.get("content") or ""
        if not isinstance(content, str):
            raise ValueError(f"Contenu invalide pour le chapitre {data['name']!r}")
        sub_items = data.get("sub_items") or []
        if not isinstance(sub_items, list):
            raise ValueError(f"sub_items invalide pour le chapitre {data['name']!r}")
        parent_names = data.get("parent_names") or []
        if not isinstance(parent_names, list):
            raise ValueError(f"parent_names invalide pour le chapitre {data['name']!r}")
        return cls(
            name=data["name"],
            content=content,
            number=data.get("number"),
            sub_items=[item_from_json(item) for item in sub_items],
            path=data.get("path"),
            source_path=data.get("source_path"),
            parent_names=list(parent_names),
            extra={k: v for k, v in data.items() if k not in CHAPTER_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "content": self.content,
            "number": self.number,
            "sub_items": [item_to_json(item) for item in self.sub_items],
            "path": self.path,
            "source_path": self.source_path,
            "parent_names": self.parent_names,
        }
        data.update(self.extra)
        return data


@dataclass
class Separator:
    """Séparateur entre chapitres (opaque)."""


@dataclass
class PartTitle:
    """Titre de partie (opaque)."""

    title: str


@dataclass
class RawItem:
    """Variante inconnue, conservée telle quelle."""

    value: Any


BookItem = Union[Chapter, Separator, PartTitle, RawItem]


def item_from_json(value: Any) -> BookItem:
    """Convertit un élément JSON de mdBook en BookItem."""
    if value == "Separator":
        return Separator()
    if isinstance(value, dict) and len(value) == 1:
        if "Chapter" in value:
            return Chapter.from_dict(value["Chapter"])
        if "PartTitle" in value and isinstance(value["PartTitle"], str):
            return PartTitle(value["PartTitle"])
    return RawItem(value)


def item_to_json(item: BookItem) -> Any:
    """Convertit un BookItem vers la forme JSON attendue par mdBook."""
    if isinstance(item, Chapter):
        return {"Chapter": item.to_dict()}
    if isinstance(item, Separator):
        return "Separator"
    if isinstance(item, PartTitle):
        return {"PartTitle": item.title}
    return item.value


@dataclass
class Book:
    """
    Livre complet : forêt ordonnée d'éléments.

    Attributes:
        sections: Éléments de premier niveau, dans l'ordre du SUMMARY.md
        extra: Champs JSON non reconnus (ex: "__non_exhaustive")
    """

    sections: list[BookItem] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=lambda: {"__non_exhaustive": None})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Book":
        sections = data.get("sections")
        if not isinstance(sections, list):
            raise ValueError("Le livre doit contenir une liste 'sections'")
        return cls(
            sections=[item_from_json(item) for item in sections],
            extra={k: v for k, v in data.items() if k != "sections"},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"sections": [item_to_json(item) for item in self.sections]}
        data.update(self.extra)
        return data

    def iter_chapters(self) -> Iterator[Chapter]:
        """Parcourt tous les chapitres en profondeur, dans l'ordre du livre."""
        yield from iter_chapters(self.sections)


def iter_chapters(items: list[BookItem]) -> Iterator[Chapter]:
    for item in items:
        if isinstance(item, Chapter):
            yield item
            yield from iter_chapters(item.sub_items)
