"""
Naming utilities for proto code generation.

Converts schema and property names into the proto naming conventions:
PascalCase message/enum names, snake_case field names and
SCREAMING_SNAKE enum values.
"""

from typing import Dict
from enum import Enum


class NamingCase(Enum):
    """Naming styles used in generated proto files."""

    PASCAL_CASE = "pascal"  # UserProfile
    SNAKE_CASE = "snake"  # user_profile
    SCREAMING_SNAKE = "screaming_snake"  # USER_PROFILE


# Separators that split identifier words
_SEPARATORS = str.maketrans({"-": "_", ".": "_", " ": "_"})


def _replace_separators(name: str) -> str:
    return name.translate(_SEPARATORS)


def _is_all_upper(part: str) -> bool:
    return not any("a" <= ch <= "z" for ch in part)


def _to_pascal_case(name: str) -> str:
    """Convert to PascalCase, keeping acronyms and inner capitals."""
    parts = []
    for part in _replace_separators(name).split("_"):
        if not part:
            continue
        if len(part) > 1 and _is_all_upper(part):
            parts.append(part)
        elif len(part) == 1:
            parts.append(part.upper())
        else:
            parts.append(part[0].upper() + part[1:])
    return "".join(parts)


def _to_snake_case(name: str) -> str:
    """Convert to snake_case, one underscore before every capital."""
    name = _replace_separators(name).strip()
    out = []
    for i, ch in enumerate(name):
        if "A" <= ch <= "Z":
            if i > 0:
                out.append("_")
            out.append(ch.lower())
        elif "a" <= ch <= "z" or "0" <= ch <= "9":
            out.append(ch)
        else:
            out.append("_")
    return "".join(out).strip("_")


def _to_screaming_snake(name: str) -> str:
    return name.upper().replace("-", "_").replace(" ", "_")


class NameNormalizer:
    """Converts arbitrary identifier text into proto naming conventions."""

    def __init__(self):
        self._name_cache: Dict[str, str] = {}

    def normalize(self, name: str, target_case: NamingCase) -> str:
        """
        Normalize a name to the target case.

        Args:
            name: Original identifier text
            target_case: Desired case style

        Returns:
            Normalized name
        """
        cache_key = f"{target_case.value}:{name}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        if target_case == NamingCase.PASCAL_CASE:
            result = _to_pascal_case(name)
        elif target_case == NamingCase.SNAKE_CASE:
            result = _to_snake_case(name)
        else:
            result = _to_screaming_snake(name)

        self._name_cache[cache_key] = result
        return result

    def type_name(self, name: str) -> str:
        """Message or enum name."""
        return self.normalize(name, NamingCase.PASCAL_CASE)

    def field_name(self, name: str) -> str:
        """Message field name."""
        return self.normalize(name, NamingCase.SNAKE_CASE)

    def enum_value(self, literal: str) -> str:
        """Enum member suffix for an enumeration literal."""
        return self.normalize(literal, NamingCase.SCREAMING_SNAKE)


# Convenience functions
def normalize_type_name(name: str) -> str:
    """Normalize name for a proto message or enum (PascalCase)."""
    return _to_pascal_case(name)


def normalize_field_name(name: str) -> str:
    """Normalize name for a proto field (snake_case)."""
    return _to_snake_case(name)


def normalize_enum_value(literal: str) -> str:
    """Normalize an enumeration literal for an enum member name."""
    return _to_screaming_snake(literal)
