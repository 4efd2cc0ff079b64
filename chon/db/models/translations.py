"""
Per-language column lookup shared by translatable content models.

Translated values live in sibling columns named ``<field>_<suffix>``
(``name_kurdish``, ``options_arabic``, ...). Models opt in by listing the
fields they translate and the fields that decide whether a language counts
as available.
"""
from typing import Any, List, Tuple

DEFAULT_LANGUAGE = "en"

# Checked in this order when listing available languages
LANGUAGE_SUFFIXES = {
    "ku": "kurdish",
    "ar": "arabic",
    "km": "kurmanji",
}


class TranslatableMixin:
    __translatable_fields__: Tuple[str, ...] = ()
    __translation_markers__: Tuple[str, ...] = ()

    def translated(self, field: str, language: str = DEFAULT_LANGUAGE) -> Any:
        """Return ``field`` in ``language``, falling back to the base column.

        Empty translations (None, "", []) never shadow the base value.
        """
        suffix = LANGUAGE_SUFFIXES.get(language)
        if suffix:
            value = getattr(self, f"{field}_{suffix}", None)
            if value:
                return value
        return getattr(self, field, None)

    def has_translation(self, language: str) -> bool:
        suffix = LANGUAGE_SUFFIXES.get(language)
        if not suffix:
            return False
        return any(getattr(self, f"{field}_{suffix}", None) for field in self.__translation_markers__)

    def has_kurdish_translation(self) -> bool:
        return self.has_translation("ku")

    def available_languages(self) -> List[str]:
        languages = [DEFAULT_LANGUAGE]
        for code in LANGUAGE_SUFFIXES:
            if self.has_translation(code):
                languages.append(code)
        return languages
