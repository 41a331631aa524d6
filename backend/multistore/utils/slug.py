# backend/multistore/utils/slug.py
"""
Generación de slugs (identificadores URL amigables).

    "Smart Watch Pro"  -> "smart-watch-pro"
    "Café  Olé!"       -> "cafe-ole"
    "ساعة"             -> "saah"

La unicidad se resuelve añadiendo sufijos -2, -3, ... hasta encontrar uno libre.
"""

import re
import unicodedata
from typing import Awaitable, Callable, Optional

_WHITESPACE = re.compile(r"\s+")
_NOT_ALLOWED = re.compile(r"[^\w-]", re.ASCII)
_MULTIPLE_DASHES = re.compile(r"-{2,}")
_VALID_SLUG = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")

_ARABIC_TRANSLITERATION = {
    "ا": "a", "أ": "a", "إ": "i", "آ": "a", "ب": "b", "ت": "t", "ث": "th",
    "ج": "j", "ح": "h", "خ": "kh", "د": "d", "ذ": "dh", "ر": "r", "ز": "z",
    "س": "s", "ش": "sh", "ص": "s", "ض": "d", "ط": "t", "ظ": "z", "ع": "a",
    "غ": "gh", "ف": "f", "ق": "q", "ك": "k", "ل": "l", "م": "m", "ن": "n",
    "ه": "h", "و": "w", "ي": "y", "ى": "a", "ة": "h", "ء": "", "ؤ": "w", "ئ": "y",
}


def transliterate_arabic(text: str) -> str:
    return "".join(_ARABIC_TRANSLITERATION.get(char, char) for char in text)


def generate_slug(text: Optional[str]) -> str:
    """Convierte un texto libre en slug. Devuelve "" si no queda nada utilizable."""
    if text is None or not text.strip():
        return ""

    slug = transliterate_arabic(text.strip().lower())
    # Elimina tildes y diacríticos (é -> e)
    slug = unicodedata.normalize("NFKD", slug)
    slug = "".join(char for char in slug if not unicodedata.combining(char))

    slug = _WHITESPACE.sub("-", slug)
    slug = _NOT_ALLOWED.sub("", slug)
    slug = _MULTIPLE_DASHES.sub("-", slug)
    return slug.strip("-")


def is_valid_slug(slug: Optional[str]) -> bool:
    return bool(slug) and bool(_VALID_SLUG.match(slug))


def truncate_slug(slug: str, max_length: int = 255) -> str:
    if len(slug) <= max_length:
        return slug
    return slug[:max_length].rstrip("-")


async def generate_unique_slug(
    text: str,
    exists: Callable[[str], Awaitable[bool]],
    fallback: str = "item",
) -> str:
    """
    Genera un slug a partir de `text` que no exista todavía.

    Args:
        text: Texto de origen (normalmente el nombre)
        exists: Corrutina que indica si un slug ya está en uso
        fallback: Texto a usar cuando `text` no produce ningún carácter válido
    """
    base_slug = truncate_slug(generate_slug(text) or generate_slug(fallback), 240)
    if not await exists(base_slug):
        return base_slug

    counter = 2
    while await exists(f"{base_slug}-{counter}"):
        counter += 1
    return f"{base_slug}-{counter}"
