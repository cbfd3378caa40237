"""
validators.py -- Parseo y validacion de los inputs del action.

Tres helpers:
1. parse_reviewers: convierte el texto libre del input `reviewers`
   en una lista de usernames
2. validate_version: verifica que la version sirva como parte de un
   nombre de branch (gradlew-update-<version>)
3. validate_repository: verifica el formato "owner/name"

Las validaciones retornan una tupla (es_valido, mensaje_de_error).
Si es_valido es True, el mensaje sera una cadena vacia.

Uso:
    from gradlew_update.utils.validators import parse_reviewers, validate_version

    reviewers = parse_reviewers("alice, bob\\ncarol")
    valido, error = validate_version("7.0")
"""

from __future__ import annotations

import re

# Separadores aceptados en el input de reviewers: saltos de linea,
# cualquier espacio en blanco y comas.
REVIEWERS_SEPARATOR = re.compile(r"[\n\s,]")

# Caracteres que git no acepta en un componente de ref
# (ver `git check-ref-format`), más # y % que romperían la URL
# de la API al buscar el branch.
INVALID_REF_CHARS = re.compile(r"[\s~^:?*\[\\#%\x00-\x1f\x7f]")

# owner/name de GitHub
REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def parse_reviewers(text: str | None) -> list[str]:
    """
    Separa el input de reviewers en usernames.

    Ejemplo:
        "alice, bob\\n  carol" → ["alice", "bob", "carol"]
    """
    if not text:
        return []
    return [r.strip() for r in REVIEWERS_SEPARATOR.split(text) if r.strip()]


def validate_version(version: str | None) -> tuple[bool, str]:
    """
    Valida que una version de Gradle pueda ir en el nombre del branch.

    No validamos el formato semver: Gradle publica versiones como
    "7.0", "6.8.3" o "7.0-rc-1", y todas son validas aqui.
    """
    if not version or not version.strip():
        return False, "La version no puede estar vacia"

    if INVALID_REF_CHARS.search(version):
        return False, f"La version contiene caracteres invalidos para un branch: {version!r}"

    if ".." in version or version.startswith(".") or version.endswith((".", ".lock", "/")):
        return False, f"La version no forma un nombre de branch valido: {version!r}"

    return True, ""


def validate_repository(repository: str | None) -> tuple[bool, str]:
    """Valida el formato owner/name."""
    if not repository:
        return False, "El repositorio no esta configurado (GITHUB_REPOSITORY)"

    if not REPOSITORY_PATTERN.match(repository):
        return False, f"El repositorio debe tener formato owner/name: {repository!r}"

    return True, ""
