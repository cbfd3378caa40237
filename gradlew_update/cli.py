"""
cli.py — Punto de entrada de gradlew-update.

Comandos disponibles:
    gradlew-update publish --target-version 7.0 --source-version 6.8
        → Crea branch + commit + PR con los archivos cambiados
    gradlew-update publish -v 7.0 --file gradlew --file gradlew.bat
        → Igual, pero con una lista explícita de archivos
    gradlew-update check --target-version 7.0
        → Dice si ya existe el branch de update
    gradlew-update config --show / --validate
        → Muestra o valida la configuración efectiva

Dentro de GitHub Actions la configuración sale del entorno
(GITHUB_REPOSITORY, GITHUB_SHA, INPUT_*). Fuera, de .env/config.yaml.

Uso desde código (testing):
    from click.testing import CliRunner
    from gradlew_update.cli import main
    CliRunner().invoke(main, ["check", "--target-version", "7.0"])
"""

from __future__ import annotations

import os
import sys

import click
import git as gitpython
import requests
from rich.panel import Panel
from rich.table import Table

from gradlew_update import __version__
from gradlew_update.config import AppConfig, load_config, validate_config
from gradlew_update.publishing.git_ops import changed_files
from gradlew_update.publishing.github_api import GitHubAPIError, GitHubClient
from gradlew_update.publishing.publisher import PublishConfig, PublishResult, UpdatePublisher
from gradlew_update.utils.logger import console as rich_console, get_logger
from gradlew_update.utils.validators import parse_reviewers, validate_version

logger = get_logger("gradlew_update.cli")


@click.group()
@click.version_option(version=__version__, prog_name="gradlew-update")
def main():
    """Propone updates del Gradle Wrapper como Pull Requests."""
    pass


@main.command()
@click.option(
    "--target-version", "-v",
    required=True,
    help="Version de Gradle a la que se actualiza (ej: 7.0)",
)
@click.option(
    "--source-version", "-s",
    default=None,
    help="Version actual del wrapper (omitir si no hay wrapper previo)",
)
@click.option(
    "--file", "-f", "files",
    multiple=True,
    help="Archivo a incluir en el commit (repetible). Default: archivos cambiados",
)
@click.option(
    "--target-branch",
    default=None,
    help="Branch destino del PR. Default: el default branch del repo",
)
@click.option(
    "--reviewers",
    default=None,
    help="Reviewers separados por coma, espacio o salto de linea",
)
@click.option(
    "--base-sha",
    default=None,
    help="Commit base. Default: GITHUB_SHA",
)
@click.option(
    "--repo-path",
    default=None,
    help="Ruta al working tree local. Default: directorio actual",
)
def publish(
    target_version: str,
    source_version: str | None,
    files: tuple[str, ...],
    target_branch: str | None,
    reviewers: str | None,
    base_sha: str | None,
    repo_path: str | None,
):
    """Crea branch, commit y PR con el update del wrapper."""
    valido, error = validate_version(target_version)
    if not valido:
        logger.error(error)
        sys.exit(1)

    cfg = load_config()
    if target_branch is not None:
        cfg.update.target_branch = target_branch
    if reviewers is not None:
        cfg.update.reviewers = reviewers
    if base_sha:
        cfg.base_sha = base_sha
    if repo_path:
        cfg.update.repo_path = repo_path

    problemas = validate_config(cfg)
    if problemas:
        for problema in problemas:
            logger.error(problema)
        sys.exit(1)

    try:
        file_list = list(files) or changed_files(cfg.update.repo_path)
        if not file_list:
            logger.warning("No hay archivos cambiados, nada que publicar")
            return

        publisher = UpdatePublisher(_build_client(cfg), _publish_config(cfg))
        result = publisher.publish(file_list, target_version, source_version)

    except GitHubAPIError as e:
        logger.error(str(e))
        sys.exit(1)
    except requests.RequestException as e:
        logger.error(f"Error de conexion con GitHub: {e}")
        sys.exit(1)
    except (gitpython.GitError, OSError) as e:
        logger.error(f"Error leyendo el repositorio local: {e}")
        sys.exit(1)

    _show_summary(result)
    if result.pr_url:
        _write_action_output("pull-request-url", result.pr_url)


@main.command()
@click.option("--target-version", "-v", required=True, help="Version de Gradle")
def check(target_version: str):
    """Dice si ya existe un branch de update para la version."""
    valido, error = validate_version(target_version)
    if not valido:
        logger.error(error)
        sys.exit(1)

    cfg = load_config()

    problemas = validate_config(cfg, require_base_sha=False)
    if problemas:
        for problema in problemas:
            logger.error(problema)
        sys.exit(1)

    publisher = UpdatePublisher(_build_client(cfg), _publish_config(cfg))
    try:
        ref = publisher.find_matching_ref(target_version)
    except (GitHubAPIError, requests.RequestException) as e:
        logger.error(str(e))
        sys.exit(1)

    if ref is None:
        logger.info(f"No existe branch de update para {target_version}")
    else:
        logger.info(f"Ya existe {ref.ref} ({ref.sha[:7]})")


@main.command()
@click.option("--show", is_flag=True, help="Muestra la configuracion actual")
@click.option("--validate", is_flag=True, help="Valida la configuracion")
def config(show: bool, validate: bool):
    """Muestra o valida la configuracion."""
    cfg = load_config()

    if show:
        tabla = Table(title="Configuracion de gradlew-update")
        tabla.add_column("Parametro", style="cyan")
        tabla.add_column("Valor", style="green")

        tabla.add_row("Repositorio", cfg.github.repository or "(no configurado)")
        tabla.add_row("API", cfg.github.api_url)
        tabla.add_row("Token", "configurado" if cfg.github_token else "falta")
        tabla.add_row("Commit base", cfg.base_sha or "(no configurado)")
        tabla.add_row("Target branch", cfg.update.target_branch or "(default branch)")
        tabla.add_row("Reviewers", ", ".join(cfg.update.reviewer_list) or "(ninguno)")
        tabla.add_row("Repo local", cfg.update.repo_path)

        rich_console.print(tabla)

    if validate:
        problemas = validate_config(cfg)
        if problemas:
            rich_console.print(Panel(
                "\n".join(f"- {p}" for p in problemas),
                title="Problemas encontrados",
                border_style="red",
            ))
            sys.exit(1)
        logger.success("Configuracion valida")


# ============================================================
# Funciones auxiliares (privadas)
# ============================================================

def _build_client(cfg: AppConfig) -> GitHubClient:
    return GitHubClient(
        token=cfg.github_token,
        repository=cfg.github.repository,
        api_url=cfg.github.api_url,
        timeout=cfg.github.timeout,
    )


def _publish_config(cfg: AppConfig) -> PublishConfig:
    return PublishConfig(
        base_sha=cfg.base_sha,
        target_branch=cfg.update.target_branch,
        reviewers=parse_reviewers(cfg.update.reviewers),
        repo_path=cfg.update.repo_path,
    )


def _show_summary(result: PublishResult) -> None:
    """Muestra resumen después de publicar."""
    if result.skipped:
        rich_console.print(Panel(
            f"[bold]Branch:[/bold] {result.branch}\n"
            f"[bold]Sha:[/bold] {result.existing_ref.sha[:7] if result.existing_ref else ''}",
            title=f"Update a {result.target_version} ya propuesto",
            border_style="yellow",
        ))
        return

    lineas = [
        f"[bold]Version:[/bold] {result.source_version or '-'} -> {result.target_version}",
        f"[bold]Branch:[/bold] {result.branch}",
        f"[bold]Commit:[/bold] {result.commit_sha[:7]}",
        f"[bold]PR:[/bold] {result.pr_url}",
    ]
    if result.warnings:
        lineas.append(f"[bold]Warnings:[/bold] {len(result.warnings)}")

    rich_console.print(Panel(
        "\n".join(lineas),
        title="Pull Request creado",
        border_style="green" if not result.warnings else "yellow",
    ))


def _write_action_output(name: str, value: str) -> None:
    """Agrega un output del step a $GITHUB_OUTPUT (si existe)."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
