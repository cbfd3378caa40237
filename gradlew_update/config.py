"""
config.py — Carga la configuración de gradlew-update.

Tres fuentes, de menor a mayor prioridad:
1. config.yaml (opcional): valores por defecto del proyecto
2. .env (opcional): secretos para correr en local
3. Variables de entorno: lo que pone GitHub Actions
   (GITHUB_REPOSITORY, GITHUB_SHA, INPUT_REPO-TOKEN, ...)

Los inputs de un action llegan como INPUT_<NOMBRE> con el nombre en
mayúsculas y los guiones tal cual (INPUT_REPO-TOKEN). Como algunos
shells no permiten guiones en variables, también aceptamos la
variante con guion bajo (INPUT_REPO_TOKEN).

Uso:
    from gradlew_update.config import load_config
    config = load_config()
    print(config.github.repository)  # "owner/repo"
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from gradlew_update.publishing.github_api import DEFAULT_API_URL
from gradlew_update.utils.validators import parse_reviewers, validate_repository


# ============================================================
# Dataclasses de configuración
# ============================================================

@dataclass
class GitHubConfig:
    """Repositorio destino y endpoint de la API."""
    repository: str = ""
    api_url: str = DEFAULT_API_URL
    timeout: int = 30


@dataclass
class UpdateConfig:
    """Opciones del PR de update."""
    target_branch: str = ""
    reviewers: str = ""
    repo_path: str = "."

    @property
    def reviewer_list(self) -> list[str]:
        return parse_reviewers(self.reviewers)


@dataclass
class AppConfig:
    """Configuración completa."""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    update: UpdateConfig = field(default_factory=UpdateConfig)

    # Solo del entorno (no están en config.yaml)
    github_token: str = ""
    base_sha: str = ""


# ============================================================
# Funciones de carga
# ============================================================

def _resolve_env_vars(value: str) -> str:
    """
    Resuelve ${VARIABLE} en un string con valores del entorno.

    Ejemplo:
        "${GITHUB_REPOSITORY}" → "owner/repo"
    """
    patron = re.compile(r"\$\{(\w+)\}")

    def reemplazar(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(0))

    return patron.sub(reemplazar, value)


def _resolve_env_recursive(data: Any) -> Any:
    if isinstance(data, str):
        return _resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_recursive(item) for item in data]
    return data


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """Convierte un dict a una dataclass, ignorando keys desconocidas."""
    campos_validos = {f.name for f in cls.__dataclass_fields__.values()}
    return cls(**{k: v for k, v in data.items() if k in campos_validos})


def _action_input(name: str) -> str | None:
    """
    Lee un input del action: INPUT_<NAME> con guiones o con guion bajo.

    Retorna None si no está definido, para distinguirlo de un input
    vacío (que sí pisa el valor de config.yaml).
    """
    upper = name.upper()
    for key in (f"INPUT_{upper}", f"INPUT_{upper.replace('-', '_')}"):
        if key in os.environ:
            return os.environ[key].strip()
    return None


def _first_env(*names: str) -> str:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return ""


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Carga la configuración completa.

    Args:
        config_path: Ruta al config.yaml. Si es None, busca
            config.yaml en el directorio actual.

    Returns:
        AppConfig lista para usar. Sin config.yaml se usan los
        valores por defecto más el entorno.
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = Path.cwd() / "config.yaml"

    raw_config: dict = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = _resolve_env_recursive(yaml.safe_load(f) or {})

    app_config = AppConfig(
        github=_dict_to_dataclass(raw_config.get("github") or {}, GitHubConfig),
        update=_dict_to_dataclass(raw_config.get("update") or {}, UpdateConfig),
    )

    # Entorno de GitHub Actions
    if os.environ.get("GITHUB_REPOSITORY"):
        app_config.github.repository = os.environ["GITHUB_REPOSITORY"]
    if os.environ.get("GITHUB_API_URL"):
        app_config.github.api_url = os.environ["GITHUB_API_URL"]

    app_config.github_token = (
        _action_input("repo-token") or _first_env("GITHUB_TOKEN", "GH_TOKEN")
    )
    app_config.base_sha = os.environ.get("GITHUB_SHA", "")

    target_branch = _action_input("target-branch")
    if target_branch is not None:
        app_config.update.target_branch = target_branch

    reviewers = _action_input("reviewers")
    if reviewers is not None:
        app_config.update.reviewers = reviewers

    return app_config


def validate_config(config: AppConfig, require_base_sha: bool = True) -> list[str]:
    """
    Verifica que la configuración alcance para publicar.

    `check` solo consulta refs, así que no necesita el commit base.

    Returns:
        Lista de problemas. Vacía si todo está bien.
    """
    problemas = []

    if not config.github_token:
        problemas.append("Falta el token de GitHub (input repo-token o GITHUB_TOKEN)")

    valido, error = validate_repository(config.github.repository)
    if not valido:
        problemas.append(error)

    if require_base_sha and not config.base_sha:
        problemas.append("Falta el commit base (GITHUB_SHA)")

    return problemas
