"""
git_ops.py — Lo poco que necesitamos del repositorio local.

El commit se arma en GitHub (blobs + tree + commit via API), no
localmente. Del working tree solo leemos:
    1. Qué archivos cambiaron (index, working tree y untracked)
    2. El contenido de cada archivo (bytes)
    3. El file mode de git de cada archivo (100644, 100755, 120000)

El file mode importa: gradlew tiene que seguir siendo ejecutable
después del update, y la API de trees no lo infiere sola.

Uso:
    from gradlew_update.publishing.git_ops import changed_files, git_file_mode
    for path in changed_files("."):
        print(path, git_file_mode(path, "."))
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

import git as gitpython

from gradlew_update.utils.logger import get_logger

logger = get_logger("gradlew_update.git")

MODE_FILE = "100644"
MODE_EXECUTABLE = "100755"
MODE_SYMLINK = "120000"


def _open_repo(repo_path: str | Path) -> gitpython.Repo:
    """
    Abre el repo Git en repo_path (o en un directorio padre).

    Raises:
        git.InvalidGitRepositoryError: Si no hay repo.
        git.NoSuchPathError: Si la ruta no existe.
    """
    return gitpython.Repo(repo_path, search_parent_directories=True)


def git_file_mode(path: str, repo_path: str | Path = ".") -> str:
    """
    Retorna el file mode de git de un archivo.

    Si el archivo está en el index usamos ese mode (es lo que git
    tiene registrado). Si no (archivo nuevo), lo deducimos del
    filesystem.

    Args:
        path: Ruta relativa a la raíz del repositorio.
        repo_path: Ruta al repositorio local.
    """
    repo = _open_repo(repo_path)
    salida = repo.git.ls_files("--stage", "--", path)

    if salida:
        # Formato: "<mode> <sha> <stage>\t<path>"
        mode = salida.splitlines()[0].split()[0]
        logger.debug(f"File mode (index) {path}: {mode}")
        return mode

    mode = _mode_from_filesystem(Path(repo.working_tree_dir) / path)
    logger.debug(f"File mode (filesystem) {path}: {mode}")
    return mode


def _mode_from_filesystem(full_path: Path) -> str:
    info = os.lstat(full_path)
    if stat.S_ISLNK(info.st_mode):
        return MODE_SYMLINK
    if info.st_mode & stat.S_IXUSR:
        return MODE_EXECUTABLE
    return MODE_FILE


def read_file_bytes(path: str, repo_path: str | Path = ".") -> bytes:
    """
    Lee el contenido crudo de un archivo del working tree.

    Igual que git_file_mode y changed_files, `path` es relativo a la
    raíz del repositorio aunque repo_path apunte a un subdirectorio.
    Los symlinks se leen como su destino (así los guarda git).
    """
    repo = _open_repo(repo_path)
    full_path = Path(repo.working_tree_dir) / path
    if full_path.is_symlink():
        return os.readlink(full_path).encode("utf-8")
    return full_path.read_bytes()


def changed_files(repo_path: str | Path = ".") -> list[str]:
    """
    Lista los archivos modificados o nuevos del working tree.

    Los archivos borrados se omiten: el update del wrapper solo
    agrega o modifica archivos, y un tree con base_tree no puede
    expresar un borrado con una entrada de blob.

    Returns:
        Rutas relativas a la raíz del repositorio, ordenadas.
    """
    repo = _open_repo(repo_path)
    root = Path(repo.working_tree_dir)

    candidatos: set[str] = set(repo.untracked_files)

    # Cambios sin stage (index vs working tree)
    for diff in repo.index.diff(None):
        candidatos.update(p for p in (diff.a_path, diff.b_path) if p)

    # Cambios en stage (HEAD vs index), solo si ya hay commits
    if repo.head.is_valid():
        for diff in repo.index.diff(repo.head.commit):
            candidatos.update(p for p in (diff.a_path, diff.b_path) if p)

    resultado = sorted(
        path for path in candidatos
        if (root / path).exists() or (root / path).is_symlink()
    )
    logger.debug(f"Changed files: {resultado}")
    return resultado
