"""
publisher.py — Publica el update del Gradle Wrapper como Pull Request.

Flujo completo (estrictamente secuencial, cada paso usa el resultado
del anterior):
    1. ¿Ya existe el branch gradlew-update-<version>? → no hacer nada
    2. Leer el commit tip (GITHUB_SHA) y su tree
    3. Un blob por cada archivo cambiado, y un tree nuevo encima
       del tree del tip
    4. Commit nuevo con el tip como único padre
    5. Ref refs/heads/gradlew-update-<version> apuntando al commit
    6. PR contra target-branch (o el default branch del repo)
    7. Asegurar que existe el label gradle-wrapper y ponerlo en el PR
    8. Pedir reviewers (opcional)

No hay reintentos ni limpieza: si un paso falla, GitHubAPIError se
propaga y la ejecución termina. Los blobs/trees huérfanos los limpia
el GC de GitHub.

Limitación conocida: el chequeo del paso 1 no es atómico con los
pasos siguientes. Dos ejecuciones simultáneas para la misma versión
pueden crear branches/PRs duplicados (o fallar en el paso 5). Un
branch que quedó de una ejecución fallida bloquea los reintentos.

Uso:
    from gradlew_update.publishing.github_api import GitHubClient
    from gradlew_update.publishing.publisher import PublishConfig, UpdatePublisher

    client = GitHubClient(token, "owner/repo")
    publisher = UpdatePublisher(client, PublishConfig(base_sha=sha))
    result = publisher.publish(["gradlew", "gradle/wrapper/gradle-wrapper.properties"], "7.0", "6.8")
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from gradlew_update.publishing import messages
from gradlew_update.publishing.git_ops import git_file_mode, read_file_bytes
from gradlew_update.publishing.github_api import (
    Commit,
    GitHubClient,
    Label,
    PullRequest,
    Ref,
    ReviewerRequestResult,
    Tree,
    TreeEntry,
)
from gradlew_update.utils.logger import get_logger

logger = get_logger("gradlew_update.publisher")

TOTAL_STEPS = 7

INCOMPLETE_REVIEWERS_WARNING = (
    "Unable to set all the PR reviewers, check usernames are correct."
)


@dataclass
class PublishConfig:
    """
    Configuración de una publicación.

    Campos:
        base_sha: Commit tip sobre el que se construye el update.
        target_branch: Branch destino del PR. Vacío = default branch.
        reviewers: Usernames a pedir como reviewers.
        repo_path: Ruta al working tree local.
    """
    base_sha: str
    target_branch: str = ""
    reviewers: list[str] = field(default_factory=list)
    repo_path: str = "."


@dataclass
class PublishResult:
    """
    Resultado de una publicación.

    skipped=True significa que el branch ya existía y no se hizo
    ninguna escritura; en ese caso existing_ref tiene el ref encontrado.
    """
    target_version: str
    source_version: str | None = None
    skipped: bool = False
    existing_ref: Ref | None = None
    branch: str = ""
    commit_sha: str = ""
    pull_request: PullRequest | None = None
    reviewers: ReviewerRequestResult | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def pr_url(self) -> str:
        return self.pull_request.url if self.pull_request else ""


class UpdatePublisher:
    """
    Arma el commit del update en GitHub y abre el PR.

    Args:
        client: Cliente de la API, ya ligado al repositorio.
        config: Configuración de la publicación.
        file_mode: Función path → file mode de git.
        read_file: Función path → bytes.
    """

    def __init__(
        self,
        client: GitHubClient,
        config: PublishConfig,
        file_mode: Callable[[str, str], str] = git_file_mode,
        read_file: Callable[[str, str], bytes] = read_file_bytes,
    ):
        self._client = client
        self._config = config
        self._file_mode = file_mode
        self._read_file = read_file

    # ============================================================
    # Flujo principal
    # ============================================================

    def publish(
        self,
        files: list[str],
        target_version: str,
        source_version: str | None = None,
    ) -> PublishResult:
        """
        Publica el update, salvo que el branch ya exista.

        Returns:
            PublishResult con skipped=True si ya había un branch para
            target_version, o con el PR creado.
        """
        existing = self.find_matching_ref(target_version)
        if existing is not None:
            logger.info(
                f"Ya existe el branch {existing.ref} "
                f"(sha {existing.sha[:7]}), no se crea otro PR"
            )
            return PublishResult(
                target_version=target_version,
                source_version=source_version,
                skipped=True,
                existing_ref=existing,
                branch=existing.ref,
            )

        return self.commit_and_create_pr(files, target_version, source_version)

    def find_matching_ref(self, version: str) -> Ref | None:
        """
        Busca el branch de update para una versión.

        GitHub hace match por prefijo: se toma el primer resultado
        sin desambiguar (gradlew-update-7.0 también encuentra
        gradlew-update-7.0.1).

        Returns:
            El primer ref que coincide, o None.
        """
        refs = self._client.list_matching_refs(messages.branch_ref_name(version))
        return refs[0] if refs else None

    def commit_and_create_pr(
        self,
        files: list[str],
        target_version: str,
        source_version: str | None = None,
    ) -> PublishResult:
        """Crea commit, branch y PR. Retorna el resultado con la URL del PR."""
        result = PublishResult(
            target_version=target_version,
            source_version=source_version,
        )

        logger.step(1, TOTAL_STEPS, f"Leyendo commit base {self._config.base_sha[:7]}")
        current_commit = self._client.get_commit(self._config.base_sha)

        logger.step(2, TOTAL_STEPS, f"Creando tree con {len(files)} archivo(s)")
        tree = self.create_tree(current_commit.tree_sha, files)

        logger.step(3, TOTAL_STEPS, "Creando commit")
        new_commit = self.create_commit(
            tree.sha,
            current_commit.sha,
            target_version,
            source_version,
        )
        result.commit_sha = new_commit.sha

        # TODO: si una ejecución anterior creó el branch pero falló antes
        # del PR, habría que usar update-ref en vez de create-ref.
        logger.step(4, TOTAL_STEPS, "Creando branch")
        branch = messages.branch_full_ref(target_version)
        ref = self._client.create_ref(branch, new_commit.sha)
        logger.debug(f"Ref sha: {ref.sha}")
        result.branch = branch

        logger.step(5, TOTAL_STEPS, "Creando Pull Request")
        pull_request = self.create_pull_request(branch, target_version, source_version)
        result.pull_request = pull_request

        logger.step(6, TOTAL_STEPS, f"Agregando label {messages.LABEL_NAME}")
        self.ensure_label()
        self._client.add_labels(pull_request.number, [messages.LABEL_NAME])

        if self._config.reviewers:
            logger.step(7, TOTAL_STEPS, "Asignando reviewers")
            result.reviewers = self.add_reviewers(pull_request.number, self._config.reviewers)
            if result.reviewers.rejected_message:
                result.warnings.append(result.reviewers.rejected_message)
            elif not result.reviewers.complete:
                result.warnings.append(INCOMPLETE_REVIEWERS_WARNING)
        else:
            logger.debug("Sin reviewers configurados")

        logger.success(f"PR #{pull_request.number} creado: {pull_request.url}")
        return result

    # ============================================================
    # Tree y commit
    # ============================================================

    def create_tree(self, base_tree_sha: str, paths: list[str]) -> Tree:
        """
        Sube un blob por archivo y crea un tree encima de base_tree_sha.

        Los blobs se crean en el orden de `paths`, todos antes del tree.
        """
        entries: list[TreeEntry] = []

        for path in paths:
            raw = self._read_file(path, self._config.repo_path)
            content = base64.b64encode(raw).decode("ascii")

            sha = self._client.create_blob(content, encoding="base64")
            mode = self._file_mode(path, self._config.repo_path)

            entries.append(TreeEntry(path=path, mode=mode, sha=sha))

        logger.debug(f"TreeData: {[e.to_dict() for e in entries]}")

        tree = self._client.create_tree(base_tree_sha, entries)
        logger.debug(f"Tree sha: {tree.sha}")
        return tree

    def create_commit(
        self,
        tree_sha: str,
        parent_sha: str,
        target_version: str,
        source_version: str | None = None,
    ) -> Commit:
        """Crea el commit del update con un solo padre y el autor bot."""
        commit = self._client.create_commit(
            message=messages.commit_message(target_version, source_version),
            tree=tree_sha,
            parents=[parent_sha],
            author={
                "name": messages.BOT_NAME,
                "email": messages.BOT_EMAIL,
                "date": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            },
        )
        logger.debug(f"Commit sha: {commit.sha}")
        return commit

    # ============================================================
    # Pull Request
    # ============================================================

    def resolve_base_branch(self) -> str:
        """target-branch si está configurado, si no el default branch."""
        if self._config.target_branch:
            return self._config.target_branch
        return self._client.get_default_branch()

    def create_pull_request(
        self,
        branch: str,
        target_version: str,
        source_version: str | None = None,
    ) -> PullRequest:
        base = self.resolve_base_branch()
        logger.debug(f"Target branch: {base}")

        return self._client.create_pull_request(
            title=messages.pr_title(target_version, source_version),
            head=branch,
            base=base,
            body=messages.pr_body(target_version, source_version),
        )

    # ============================================================
    # Label y reviewers
    # ============================================================

    def ensure_label(self) -> Label:
        """
        Busca el label gradle-wrapper y lo crea si no existe.

        Cualquier error distinto de "no existe" se propaga.
        """
        label = self._client.get_label(messages.LABEL_NAME)
        if label is not None:
            logger.debug(f"Label description: {label.description}")
            return label

        logger.debug("Label not found")
        label = self._client.create_label(
            messages.LABEL_NAME,
            messages.LABEL_COLOR,
            messages.LABEL_DESCRIPTION,
        )
        logger.debug(f"Label id: {label.id}")
        return label

    def add_reviewers(self, pr_number: int, reviewers: list[str]) -> ReviewerRequestResult:
        """
        Pide reviewers para el PR.

        Si GitHub rechaza o descarta usernames se emite un warning y
        el flujo sigue; cualquier otro error es fatal.
        """
        logger.info(f"Adding PR reviewers: {', '.join(reviewers)}")

        result = self._client.request_reviewers(pr_number, reviewers)

        if result.rejected_message:
            logger.warning(result.rejected_message)
        elif not result.complete:
            logger.debug(f"Added reviewers: {' '.join(result.added)}")
            logger.warning(INCOMPLETE_REVIEWERS_WARNING)

        return result

