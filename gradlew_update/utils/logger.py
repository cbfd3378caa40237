"""
logger.py — Logging para gradlew-update usando Rich + archivo.

Triple output:
- Rich console: colores y formato para uso interactivo
- Archivo rotativo: logs/gradlew-update.log para debugging post-mortem
- Workflow commands de GitHub Actions (::warning:: / ::error::) cuando
  corremos dentro de un runner, para que aparezcan como anotaciones

Los mensajes debug solo van a consola si RUNNER_DEBUG=1 (el flag que
GitHub Actions pone al re-ejecutar con debug) o GRADLEW_UPDATE_DEBUG=1.
Al archivo van siempre.

Uso:
    from gradlew_update.utils.logger import get_logger, console
    logger = get_logger("gradlew_update.publisher")
    logger.debug(f"Tree sha: {tree.sha}")
    logger.success("PR creado")
    logger.warning("No se pudieron asignar todos los reviewers")
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

# No escribir logs a disco dentro de pytest
_in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ

update_theme = Theme({
    "debug": "dim",
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "step": "bold rgb(2,48,58)",  # Mismo color que el label gradle-wrapper
})

# Consola global — se usa en todo el proyecto
console = Console(theme=update_theme)

# ================================================================
# File logging setup
# ================================================================

_file_logger: logging.Logger | None = None


def _setup_file_logger() -> logging.Logger:
    """Configura el logger de archivo con rotacion."""
    global _file_logger
    if _file_logger is not None:
        return _file_logger

    if _in_pytest:
        _file_logger = logging.getLogger("gradlew_update.null")
        _file_logger.addHandler(logging.NullHandler())
        return _file_logger

    log_dir = Path(os.environ.get("GRADLEW_UPDATE_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    _file_logger = logging.getLogger("gradlew_update.file")
    _file_logger.setLevel(logging.DEBUG)

    # Evitar handlers duplicados
    if not _file_logger.handlers:
        handler = RotatingFileHandler(
            log_dir / "gradlew-update.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _file_logger.addHandler(handler)

    return _file_logger


def _debug_enabled() -> bool:
    """True si el runner (o el usuario) pidio output de debug."""
    return (
        os.environ.get("RUNNER_DEBUG") == "1"
        or os.environ.get("GRADLEW_UPDATE_DEBUG") == "1"
    )


def _in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def _workflow_command(kind: str, message: str) -> str:
    """
    Formatea un workflow command de GitHub Actions.

    El runner interpreta los caracteres %, CR y LF, asi que hay que
    escaparlos igual que lo hace @actions/core.
    """
    escaped = (
        message.replace("%", "%25")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
    )
    return f"::{kind}::{escaped}"


class UpdateLogger:
    """
    Logger que usa Rich para la consola y un archivo rotativo.

    Cada módulo crea su propio logger con un nombre para
    identificar de dónde viene cada mensaje.

    Args:
        name: Nombre del módulo (ej: "gradlew_update.publisher")
    """

    def __init__(self, name: str):
        self._name = name
        self._file = _setup_file_logger()

    @property
    def name(self) -> str:
        return self._name

    def debug(self, message: str) -> None:
        """Mensaje de debug (gris, solo si está habilitado)."""
        if _debug_enabled():
            console.print(f"[debug]{escape(message)}[/debug]")
        self._file.debug(f"[{self._name}] {message}")

    def info(self, message: str) -> None:
        """Mensaje informativo (cyan)."""
        console.print(f"[info]i  {escape(message)}[/info]")
        self._file.info(f"[{self._name}] {message}")

    def success(self, message: str) -> None:
        """Mensaje de éxito (verde)."""
        console.print(f"[success]\\[OK] {escape(message)}[/success]")
        self._file.info(f"[{self._name}] OK: {message}")

    def warning(self, message: str) -> None:
        """Mensaje de advertencia (amarillo)."""
        if _in_github_actions():
            print(_workflow_command("warning", message), flush=True)
        console.print(f"[warning]\\[!] {escape(message)}[/warning]")
        self._file.warning(f"[{self._name}] {message}")

    def error(self, message: str) -> None:
        """Mensaje de error (rojo)."""
        if _in_github_actions():
            print(_workflow_command("error", message), flush=True)
        console.print(f"[error]\\[X] {escape(message)}[/error]")
        self._file.error(f"[{self._name}] {message}")

    def step(self, number: int, total: int, message: str) -> None:
        """Mensaje de paso en un proceso."""
        console.print(f"[step]  \\[{number}/{total}] {escape(message)}[/step]")
        self._file.info(f"[{self._name}] [{number}/{total}] {message}")


def get_logger(name: str = "gradlew_update") -> UpdateLogger:
    """
    Obtiene un logger para el módulo especificado.

    Ejemplo:
        logger = get_logger("gradlew_update.github")
        logger.info("Creando PR...")
    """
    return UpdateLogger(name)
