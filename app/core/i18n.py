from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Mapping

from fastapi import Request

from app.core.config import settings

_INTERPOLATION_RE = re.compile(r"%\{(\w+)\}")

MESSAGES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "en": MappingProxyType(
            {
                "badRequest": "Bad request",
                "notFound": "Resource not found",
                "invalidFilter": "The filter must be a valid JSON object",
                "invalidFilterOperator": "Unsupported filter operator for field %{field}",
                "invalidFilterValue": "Invalid filter value for field %{field} (%{kind})",
                "unknownFilterField": "Unknown filter field: %{field}",
                "unknownRelation": "Unknown relation: %{relation}",
                "successfulUsersFound": "Users found successfully",
                "noUsersFound": "No users found",
                "successfulUserFound": "User found successfully",
                "noUserFound": "No user found with this id",
                "successfulCategoriesFound": "Categories found successfully",
                "noCategoriesFound": "No categories found",
                "successfulCategoryFound": "Category found successfully",
                "noCategoryFound": "No category found with this id",
                "successfulProductsFound": "Products found successfully",
                "noProductsFound": "No products found",
                "successfulProductFound": "Product found successfully",
                "noProductFound": "No product found with this id",
                "successfulReviewsFound": "Reviews found successfully",
                "noReviewsFound": "No reviews found",
                "successfulReviewFound": "Review found successfully",
                "noReviewFound": "No review found with this id",
            }
        ),
        "es": MappingProxyType(
            {
                "badRequest": "Solicitud incorrecta",
                "notFound": "Recurso no encontrado",
                "invalidFilter": "El filtro debe ser un objeto JSON válido",
                "invalidFilterOperator": "Operador de filtro no soportado para el campo %{field}",
                "invalidFilterValue": "Valor de filtro no válido para el campo %{field} (%{kind})",
                "unknownFilterField": "Campo de filtro desconocido: %{field}",
                "unknownRelation": "Relación desconocida: %{relation}",
                "successfulUsersFound": "Usuarios encontrados con éxito",
                "noUsersFound": "No se encontraron usuarios",
                "successfulUserFound": "Usuario encontrado con éxito",
                "noUserFound": "No se encontró ningún usuario con este id",
                "successfulCategoriesFound": "Categorías encontradas con éxito",
                "noCategoriesFound": "No se encontraron categorías",
                "successfulCategoryFound": "Categoría encontrada con éxito",
                "noCategoryFound": "No se encontró ninguna categoría con este id",
                "successfulProductsFound": "Productos encontrados con éxito",
                "noProductsFound": "No se encontraron productos",
                "successfulProductFound": "Producto encontrado con éxito",
                "noProductFound": "No se encontró ningún producto con este id",
                "successfulReviewsFound": "Reseñas encontradas con éxito",
                "noReviewsFound": "No se encontraron reseñas",
                "successfulReviewFound": "Reseña encontrada con éxito",
                "noReviewFound": "No se encontró ninguna reseña con este id",
            }
        ),
    }
)


class Translator:
    """Read-only phrase lookup for one request."""

    __slots__ = ("locale", "_phrases")

    def __init__(self, locale: str):
        self.locale = locale if locale in MESSAGES else settings.DEFAULT_LOCALE
        self._phrases = MESSAGES.get(self.locale, {})

    def t(self, key: str, **params: Any) -> str:
        phrase = self._phrases.get(key, key)
        if not params:
            return phrase
        return _INTERPOLATION_RE.sub(lambda m: str(params.get(m.group(1), m.group(0))), phrase)


def _accept_language_entries(header: str) -> list[tuple[float, int, str]]:
    entries = []
    for index, part in enumerate(header.split(",")):
        chunks = [c.strip() for c in part.split(";")]
        tag = chunks[0].lower()
        if not tag:
            continue
        quality = 1.0
        for chunk in chunks[1:]:
            if chunk.startswith("q="):
                try:
                    quality = float(chunk[2:])
                except ValueError:
                    quality = 0.0
        entries.append((quality, index, tag))
    entries.sort(key=lambda item: (-item[0], item[1]))
    return entries


def resolve_locale(accept_language: str | None) -> str:
    supported = settings.supported_locales_list
    for quality, _, tag in _accept_language_entries(str(accept_language or "")):
        if quality <= 0:
            continue
        language = tag.split("-")[0]
        if language in supported and language in MESSAGES:
            return language
    return settings.DEFAULT_LOCALE


def get_translator(request: Request) -> Translator:
    translator = Translator(resolve_locale(request.headers.get("accept-language")))
    request.state.translator = translator
    return translator


def translator_for_request(request: Request) -> Translator:
    translator = getattr(request.state, "translator", None)
    if isinstance(translator, Translator):
        return translator
    return get_translator(request)
