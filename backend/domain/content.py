"""
Catégories de contenu du portfolio.

Chaque catégorie correspond à un document JSON unique (`<catégorie>.json`),
en général un mapping code langue -> liste d'éléments propres à la catégorie.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from backend.domain.errors import UnknownCategoryError

ContentDocument = Any


class Category(str, Enum):
    STATS = "stats"
    FORMATIONS = "formations"
    SKILLS = "skills"
    PROJECTS = "projects"
    RECOMMENDATIONS = "recommendations"
    DOCUMENTS = "documents"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


# Messages de confirmation renvoyés après sauvegarde
SAVED_MESSAGES: dict[Category, str] = {
    Category.STATS: "Stats mises à jour",
    Category.FORMATIONS: "Formations mises à jour",
    Category.SKILLS: "Compétences mises à jour",
    Category.PROJECTS: "Projets mis à jour",
    Category.RECOMMENDATIONS: "Recommandations mises à jour",
    Category.DOCUMENTS: "Documents mis à jour",
}


def parse_category(name: str) -> Category:
    """Convertit un segment d'URL en `Category`, ou lève `UnknownCategoryError`."""
    try:
        return Category(name)
    except ValueError as err:
        raise UnknownCategoryError(f"unknown_category:{name}") from err
