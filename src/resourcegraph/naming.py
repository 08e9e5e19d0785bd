from __future__ import annotations

import re

import inflection


def field_name(name: str) -> str:
    """snake_case attribute name -> camelCase GraphQL field name."""
    return inflection.camelize(name, False)


def type_name(name: str) -> str:
    return inflection.camelize(name, True)


def structural_key(name: str) -> str:
    """``PORO::EmployeeResource`` -> ``POROEmployee``, ``employees`` -> ``Employee``."""
    key = re.sub(r"Resource$", "", name)
    key = key.replace("::", "").replace(".", "")
    return inflection.camelize(inflection.singularize(key))


def show_field_name(entrypoint: str) -> str:
    return field_name(inflection.singularize(entrypoint))


__all__ = ["field_name", "type_name", "structural_key", "show_field_name"]
