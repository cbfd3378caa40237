"""
github_api.py — Cliente de la REST API de GitHub para gradlew-update.

Solo implementa las llamadas que necesita el flujo de actualización:
    - Git Data API: matching-refs, commits, blobs, trees, refs
    - Repos: default branch
    - Pulls: crear PR, pedir reviewers
    - Issues: labels

Cada método hace exactamente una llamada HTTP. No hay reintentos:
si GitHub responde con un status inesperado se lanza GitHubAPIError
y el flujo completo se aborta.

Las dos situaciones "esperadas" no son excepciones sino resultados:
    - get_label() retorna None si el label no existe (404)
    - request_reviewers() retorna un ReviewerRequestResult con el
      mensaje de GitHub si rechazó usernames (422)

Uso:
    from gradlew_update.publishing.github_api import GitHubClient
    client = GitHubClient(token, "owner/repo")
    refs = client.list_matching_refs("heads/gradlew-update-7.0")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from gradlew_update.utils.logger import get_logger

logger = get_logger("gradlew_update.github")

DEFAULT_API_URL = "https://api.github.com"


class GitHubAPIError(RuntimeError):
    """
    GitHub respondió con un status que no esperábamos.

    Args:
        status: Código HTTP de la respuesta.
        message: Mensaje de error que devolvió GitHub.
        url: URL de la llamada que falló.
    """

    def __init__(self, status: int, message: str, url: str = ""):
        super().__init__(f"GitHub API {status}: {message}")
        self.status = status
        self.message = message
        self.url = url


# ============================================================
# Resultados
# ============================================================

@dataclass
class Ref:
    """Un ref de git (ej: refs/heads/gradlew-update-7.0)."""
    ref: str
    sha: str


@dataclass
class Commit:
    """Commit de git: su sha y el sha de su tree."""
    sha: str
    tree_sha: str
    message: str = ""


@dataclass
class TreeEntry:
    """Una entrada del tree: path → (mode, type, blob sha)."""
    path: str
    mode: str
    sha: str
    type: str = "blob"

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "mode": self.mode,
            "type": self.type,
            "sha": self.sha,
        }


@dataclass
class Tree:
    sha: str


@dataclass
class PullRequest:
    """
    Datos de un Pull Request creado en GitHub.

    Campos:
        number: Número del PR (se usa para labels y reviewers)
        url: URL pública del PR (html_url)
        title: Título del PR
        head: Branch fuente
        base: Branch destino
    """
    number: int
    url: str
    title: str = ""
    head: str = ""
    base: str = ""


@dataclass
class Label:
    name: str
    color: str = ""
    description: str = ""
    id: int = 0


@dataclass
class ReviewerRequestResult:
    """
    Resultado de pedir reviewers para un PR.

    Campos:
        requested: Usernames que pedimos.
        added: Usernames que GitHub aceptó.
        rejected_message: Mensaje de GitHub si rechazó la petición
            por validación (422). None si la aceptó.
    """
    requested: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    rejected_message: str | None = None

    @property
    def complete(self) -> bool:
        """True si GitHub aceptó a todos los reviewers pedidos."""
        return self.rejected_message is None and len(self.added) == len(self.requested)


# ============================================================
# Cliente
# ============================================================

class GitHubClient:
    """
    Cliente mínimo de la REST API de GitHub, ligado a un repositorio.

    El token se recibe como parámetro: no hay cliente global. Quien
    llama construye el cliente una vez y lo pasa a UpdatePublisher.

    Args:
        token: Token de acceso (GITHUB_TOKEN o PAT).
        repository: Repositorio en formato "owner/name".
        api_url: URL base de la API (GitHub Enterprise usa otra).
        session: requests.Session a usar (útil en tests).
        timeout: Timeout en segundos de cada llamada.
    """

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: int = 30,
    ):
        self._repository = repository
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "gradlew-update",
        })

    @property
    def repository(self) -> str:
        return self._repository

    # ============================================================
    # HTTP
    # ============================================================

    def _repo_url(self, path: str) -> str:
        return f"{self._api_url}/repos/{self._repository}{path}"

    def _request(
        self,
        method: str,
        path: str,
        expected: tuple[int, ...] = (200,),
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        """
        Hace una llamada y verifica el status.

        Raises:
            GitHubAPIError: Si el status no está en `expected`.
            requests.RequestException: Errores de red/transporte.
        """
        url = self._repo_url(path)
        response = self._session.request(method, url, json=json, timeout=self._timeout)

        if response.status_code not in expected:
            raise GitHubAPIError(response.status_code, _error_message(response), url)

        return response

    # ============================================================
    # Git Data API
    # ============================================================

    def list_matching_refs(self, ref: str) -> list[Ref]:
        """Lista los refs cuyo nombre empieza con `ref` (ej: heads/foo)."""
        response = self._request("GET", f"/git/matching-refs/{quote(ref, safe='/')}")
        return [
            Ref(ref=item["ref"], sha=item["object"]["sha"])
            for item in response.json()
        ]

    def get_commit(self, sha: str) -> Commit:
        data = self._request("GET", f"/git/commits/{sha}").json()
        return Commit(
            sha=data["sha"],
            tree_sha=data["tree"]["sha"],
            message=data.get("message", ""),
        )

    def create_blob(self, content: str, encoding: str = "base64") -> str:
        """Crea un blob y retorna su sha."""
        data = self._request(
            "POST", "/git/blobs",
            expected=(201,),
            json={"content": content, "encoding": encoding},
        ).json()
        return data["sha"]

    def create_tree(self, base_tree: str, entries: list[TreeEntry]) -> Tree:
        data = self._request(
            "POST", "/git/trees",
            expected=(201,),
            json={
                "base_tree": base_tree,
                "tree": [entry.to_dict() for entry in entries],
            },
        ).json()
        return Tree(sha=data["sha"])

    def create_commit(
        self,
        message: str,
        tree: str,
        parents: list[str],
        author: dict[str, str] | None = None,
    ) -> Commit:
        payload: dict[str, Any] = {
            "message": message,
            "tree": tree,
            "parents": parents,
        }
        if author:
            payload["author"] = author

        data = self._request("POST", "/git/commits", expected=(201,), json=payload).json()

        logger.debug(f"Commit author name: {data.get('author', {}).get('name')}")
        logger.debug(f"Commit committer name: {data.get('committer', {}).get('name')}")
        logger.debug(f"Commit verified: {data.get('verification', {}).get('verified')}")

        return Commit(sha=data["sha"], tree_sha=data["tree"]["sha"], message=message)

    def create_ref(self, ref: str, sha: str) -> Ref:
        """
        Crea un ref nuevo. GitHub responde 422 si ya existe, y eso
        se propaga como GitHubAPIError.
        """
        data = self._request(
            "POST", "/git/refs",
            expected=(201,),
            json={"ref": ref, "sha": sha},
        ).json()
        return Ref(ref=data["ref"], sha=data["object"]["sha"])

    # ============================================================
    # Repos / Pulls
    # ============================================================

    def get_default_branch(self) -> str:
        data = self._request("GET", "").json()
        return data["default_branch"]

    def create_pull_request(
        self,
        title: str,
        head: str,
        base: str,
        body: str,
    ) -> PullRequest:
        data = self._request(
            "POST", "/pulls",
            expected=(201,),
            json={"title": title, "head": head, "base": base, "body": body},
        ).json()

        logger.debug(f"PR changed files: {data.get('changed_files')}")
        logger.debug(f"PR mergeable: {data.get('mergeable')}")
        logger.debug(f"PR user: {data.get('user', {}).get('login')}")

        return PullRequest(
            number=data["number"],
            url=data["html_url"],
            title=data.get("title", title),
            head=head,
            base=base,
        )

    def request_reviewers(self, pr_number: int, reviewers: list[str]) -> ReviewerRequestResult:
        """
        Pide reviewers para un PR.

        GitHub puede aceptar solo una parte (usernames inválidos se
        descartan en silencio) o rechazar con 422. Ambos casos se
        reportan en el resultado; cualquier otro status es fatal.
        """
        response = self._request(
            "POST", f"/pulls/{pr_number}/requested_reviewers",
            expected=(201, 422),
            json={"reviewers": reviewers},
        )

        if response.status_code == 422:
            return ReviewerRequestResult(
                requested=list(reviewers),
                rejected_message=_error_message(response),
            )

        added = [r["login"] for r in response.json().get("requested_reviewers", [])]
        return ReviewerRequestResult(requested=list(reviewers), added=added)

    # ============================================================
    # Labels
    # ============================================================

    def get_label(self, name: str) -> Label | None:
        """Busca un label por nombre. None si no existe."""
        response = self._request(
            "GET", f"/labels/{quote(name, safe='')}",
            expected=(200, 404),
        )
        if response.status_code == 404:
            return None
        return _label_from(response.json())

    def create_label(self, name: str, color: str, description: str) -> Label:
        data = self._request(
            "POST", "/labels",
            expected=(201,),
            json={"name": name, "color": color, "description": description},
        ).json()
        return _label_from(data)

    def add_labels(self, issue_number: int, labels: list[str]) -> None:
        self._request(
            "POST", f"/issues/{issue_number}/labels",
            expected=(200,),
            json={"labels": labels},
        )


# ============================================================
# Helpers
# ============================================================

def _label_from(data: dict[str, Any]) -> Label:
    return Label(
        name=data["name"],
        color=data.get("color", ""),
        description=data.get("description") or "",
        id=data.get("id", 0),
    )


def _error_message(response: requests.Response) -> str:
    """Extrae el mensaje de error de una respuesta de GitHub."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or ""

    if not isinstance(data, dict):
        return str(data)

    message = data.get("message", "")
    errors = data.get("errors")
    if errors:
        detalles = "; ".join(
            e.get("message", str(e)) if isinstance(e, dict) else str(e)
            for e in errors
        )
        return f"{message} ({detalles})" if message else detalles
    return message
