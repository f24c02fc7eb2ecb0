"""Utility functions for CQRS project generation."""
from decimal import Decimal, InvalidOperation
from typing import Optional, Union


def to_camel_case(name: str) -> str:
    """Convert PascalCase to camelCase."""
    if not name:
        return name
    return name[0].lower() + name[1:]


def cs_string(value: str) -> str:
    """Quote a value as a C# string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def cs_verbatim(value: str) -> str:
    """Quote a value as a C# verbatim string (used for regex patterns)."""
    return '@"' + value.replace('"', '""') + '"'


def cs_number(value: Union[int, float, Decimal], cs_type: str) -> str:
    """Render a numeric literal with the suffix its C# type needs."""
    if cs_type in ("int", "short", "byte"):
        return str(int(value))
    if cs_type == "long":
        return f"{int(value)}L"
    text = format(Decimal(str(value)).normalize(), "f")
    if cs_type == "decimal":
        return f"{text}m"
    if cs_type == "float":
        return f"{text}f"
    if cs_type == "double" and "." not in text:
        return f"{text}.0"
    return text


NUMERIC_SUFFIXES = "mMfFdDlL"


def cs_default_literal(value: str, cs_type: str) -> Optional[str]:
    """
    Translate a model default value into a C# literal for the given type.

    Numeric defaults may carry their C# suffix ("0m", "1.5f"). Raises ValueError
    when a numeric default is not a finite number.
    """
    if value is None:
        return None
    if cs_type == "string":
        return cs_string(value)
    if cs_type == "bool":
        return "true" if value.strip().lower() in ("true", "1", "yes") else "false"
    if cs_type in ("int", "long", "decimal", "double", "float"):
        text = value.strip().rstrip(NUMERIC_SUFFIXES)
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"default value '{value}' is not a valid {cs_type}") from None
        if not number.is_finite():
            raise ValueError(f"default value '{value}' is not a valid {cs_type}")
        return cs_number(number, cs_type)
    # Anything else is passed through as an expression.
    return value
