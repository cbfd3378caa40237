"""
test_github_api.py — Tests para GitHubClient.

Verifica:
- URLs, métodos y payloads de cada llamada
- Headers de autenticación
- Status inesperados → GitHubAPIError
- get_label: 404 → None
- request_reviewers: aceptación parcial y 422 como resultado
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from gradlew_update.publishing.github_api import (
    GitHubAPIError,
    GitHubClient,
    TreeEntry,
)

API = "https://api.github.com/repos/owner/repo"


def _response(status: int, data=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.reason = "Reason"
    resp.text = text
    if data is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = data
    return resp


@pytest.fixture
def session():
    mock = MagicMock()
    mock.headers = {}
    return mock


@pytest.fixture
def client(session):
    return GitHubClient("tok123", "owner/repo", session=session)


def _last_call(session):
    args, kwargs = session.request.call_args
    return args[0], args[1], kwargs.get("json")


# ================================================================
# Sesión y errores
# ================================================================

class TestSession:
    def test_headers_de_autenticacion(self, session, client):
        assert session.headers["Authorization"] == "Bearer tok123"
        assert session.headers["Accept"] == "application/vnd.github+json"

    def test_api_url_custom(self, session):
        client = GitHubClient("t", "owner/repo", api_url="https://ghe.local/api/v3/", session=session)
        session.request.return_value = _response(200, {"default_branch": "main"})
        client.get_default_branch()
        _, url, _ = _last_call(session)
        assert url == "https://ghe.local/api/v3/repos/owner/repo"

    def test_timeout(self, session):
        client = GitHubClient("t", "owner/repo", session=session, timeout=5)
        session.request.return_value = _response(200, {"default_branch": "main"})
        client.get_default_branch()
        assert session.request.call_args[1]["timeout"] == 5

    def test_status_inesperado_lanza_error(self, session, client):
        session.request.return_value = _response(401, {"message": "Bad credentials"})
        with pytest.raises(GitHubAPIError) as exc:
            client.get_commit("abc")
        assert exc.value.status == 401
        assert "Bad credentials" in str(exc.value)
        assert exc.value.url == f"{API}/git/commits/abc"

    def test_mensaje_con_detalles_de_errors(self, session, client):
        session.request.return_value = _response(422, {
            "message": "Validation Failed",
            "errors": [{"message": "A pull request already exists for owner:gradlew-update-7.0."}],
        })
        with pytest.raises(GitHubAPIError) as exc:
            client.create_pull_request("t", "h", "main", "b")
        assert "Validation Failed" in exc.value.message
        assert "already exists" in exc.value.message

    def test_respuesta_sin_json(self, session, client):
        session.request.return_value = _response(502, text="Bad Gateway")
        with pytest.raises(GitHubAPIError) as exc:
            client.get_default_branch()
        assert exc.value.message == "Bad Gateway"

    def test_error_de_red_se_propaga(self, session, client):
        session.request.side_effect = requests.ConnectionError("sin red")
        with pytest.raises(requests.ConnectionError):
            client.list_matching_refs("heads/gradlew-update-7.0")


# ================================================================
# Git Data API
# ================================================================

class TestGitData:
    def test_list_matching_refs(self, session, client):
        session.request.return_value = _response(200, [
            {"ref": "refs/heads/gradlew-update-7.0", "object": {"sha": "111"}},
        ])
        refs = client.list_matching_refs("heads/gradlew-update-7.0")

        method, url, _ = _last_call(session)
        assert method == "GET"
        assert url == f"{API}/git/matching-refs/heads/gradlew-update-7.0"
        assert refs[0].ref == "refs/heads/gradlew-update-7.0"
        assert refs[0].sha == "111"

    def test_list_matching_refs_vacio(self, session, client):
        session.request.return_value = _response(200, [])
        assert client.list_matching_refs("heads/gradlew-update-7.0") == []

    def test_list_matching_refs_escapa_el_ref(self, session, client):
        session.request.return_value = _response(200, [])
        client.list_matching_refs("heads/gradlew-update-7.0#1")

        _, url, _ = _last_call(session)
        assert url == f"{API}/git/matching-refs/heads/gradlew-update-7.0%231"

    def test_get_commit(self, session, client):
        session.request.return_value = _response(200, {
            "sha": "c1", "tree": {"sha": "t1"}, "message": "init",
        })
        commit = client.get_commit("c1")
        assert commit.sha == "c1"
        assert commit.tree_sha == "t1"

    def test_create_blob(self, session, client):
        session.request.return_value = _response(201, {"sha": "blob1"})
        sha = client.create_blob("aGVsbG8=")

        method, url, payload = _last_call(session)
        assert (method, url) == ("POST", f"{API}/git/blobs")
        assert payload == {"content": "aGVsbG8=", "encoding": "base64"}
        assert sha == "blob1"

    def test_create_tree(self, session, client):
        session.request.return_value = _response(201, {"sha": "tree1"})
        tree = client.create_tree("base", [TreeEntry(path="gradlew", mode="100755", sha="b1")])

        _, url, payload = _last_call(session)
        assert url == f"{API}/git/trees"
        assert payload == {
            "base_tree": "base",
            "tree": [{"path": "gradlew", "mode": "100755", "type": "blob", "sha": "b1"}],
        }
        assert tree.sha == "tree1"

    def test_create_commit(self, session, client):
        session.request.return_value = _response(201, {
            "sha": "c2",
            "tree": {"sha": "tree1"},
            "author": {"name": "gradle-update-robot"},
            "committer": {"name": "GitHub"},
            "verification": {"verified": False},
        })
        author = {"name": "bot", "email": "bot@example.com", "date": "2020-01-01T00:00:00+00:00"}
        commit = client.create_commit("msg", "tree1", ["c1"], author)

        _, url, payload = _last_call(session)
        assert url == f"{API}/git/commits"
        assert payload == {"message": "msg", "tree": "tree1", "parents": ["c1"], "author": author}
        assert commit.sha == "c2"

    def test_create_ref(self, session, client):
        session.request.return_value = _response(201, {
            "ref": "refs/heads/gradlew-update-7.0", "object": {"sha": "c2"},
        })
        ref = client.create_ref("refs/heads/gradlew-update-7.0", "c2")

        _, url, payload = _last_call(session)
        assert url == f"{API}/git/refs"
        assert payload == {"ref": "refs/heads/gradlew-update-7.0", "sha": "c2"}
        assert ref.sha == "c2"

    def test_create_ref_existente_falla(self, session, client):
        session.request.return_value = _response(422, {"message": "Reference already exists"})
        with pytest.raises(GitHubAPIError) as exc:
            client.create_ref("refs/heads/gradlew-update-7.0", "c2")
        assert exc.value.status == 422


# ================================================================
# Repos y Pulls
# ================================================================

class TestPulls:
    def test_default_branch(self, session, client):
        session.request.return_value = _response(200, {"default_branch": "trunk"})
        assert client.get_default_branch() == "trunk"
        method, url, _ = _last_call(session)
        assert (method, url) == ("GET", API)

    def test_create_pull_request(self, session, client):
        session.request.return_value = _response(201, {
            "number": 42,
            "html_url": "https://github.com/owner/repo/pull/42",
            "title": "Updates Gradle Wrapper to 7.0.",
            "user": {"login": "github-actions[bot]"},
        })
        pr = client.create_pull_request(
            "Updates Gradle Wrapper to 7.0.", "refs/heads/gradlew-update-7.0", "main", "body",
        )

        _, url, payload = _last_call(session)
        assert url == f"{API}/pulls"
        assert payload["head"] == "refs/heads/gradlew-update-7.0"
        assert payload["base"] == "main"
        assert pr.number == 42
        assert pr.url == "https://github.com/owner/repo/pull/42"

    def test_reviewers_todos_aceptados(self, session, client):
        session.request.return_value = _response(201, {
            "requested_reviewers": [{"login": "alice"}, {"login": "bob"}],
        })
        result = client.request_reviewers(42, ["alice", "bob"])

        _, url, payload = _last_call(session)
        assert url == f"{API}/pulls/42/requested_reviewers"
        assert payload == {"reviewers": ["alice", "bob"]}
        assert result.complete
        assert result.added == ["alice", "bob"]

    def test_reviewers_aceptacion_parcial(self, session, client):
        session.request.return_value = _response(201, {
            "requested_reviewers": [{"login": "alice"}],
        })
        result = client.request_reviewers(42, ["alice", "nadie"])
        assert not result.complete
        assert result.rejected_message is None
        assert result.added == ["alice"]

    def test_reviewers_422_es_resultado(self, session, client):
        session.request.return_value = _response(422, {
            "message": "Reviews may only be requested from collaborators.",
        })
        result = client.request_reviewers(42, ["nadie"])
        assert not result.complete
        assert result.rejected_message == "Reviews may only be requested from collaborators."

    def test_reviewers_otro_error_lanza(self, session, client):
        session.request.return_value = _response(404, {"message": "Not Found"})
        with pytest.raises(GitHubAPIError):
            client.request_reviewers(42, ["alice"])


# ================================================================
# Labels
# ================================================================

class TestLabels:
    def test_get_label_existente(self, session, client):
        session.request.return_value = _response(200, {
            "id": 7, "name": "gradle-wrapper", "color": "02303A",
            "description": "Pull requests that update Gradle wrapper",
        })
        label = client.get_label("gradle-wrapper")

        _, url, _ = _last_call(session)
        assert url == f"{API}/labels/gradle-wrapper"
        assert label.id == 7
        assert label.color == "02303A"

    def test_get_label_404_es_none(self, session, client):
        session.request.return_value = _response(404, {"message": "Not Found"})
        assert client.get_label("gradle-wrapper") is None

    def test_get_label_otro_error_lanza(self, session, client):
        session.request.return_value = _response(500, {"message": "Server Error"})
        with pytest.raises(GitHubAPIError):
            client.get_label("gradle-wrapper")

    def test_get_label_escapa_el_nombre(self, session, client):
        session.request.return_value = _response(404, {"message": "Not Found"})
        client.get_label("needs review")
        _, url, _ = _last_call(session)
        assert url == f"{API}/labels/needs%20review"

    def test_create_label(self, session, client):
        session.request.return_value = _response(201, {
            "id": 8, "name": "gradle-wrapper", "color": "02303A", "description": None,
        })
        label = client.create_label("gradle-wrapper", "02303A", "desc")

        _, url, payload = _last_call(session)
        assert url == f"{API}/labels"
        assert payload == {"name": "gradle-wrapper", "color": "02303A", "description": "desc"}
        assert label.description == ""

    def test_add_labels(self, session, client):
        session.request.return_value = _response(200, [{"name": "gradle-wrapper"}])
        client.add_labels(42, ["gradle-wrapper"])

        method, url, payload = _last_call(session)
        assert (method, url) == ("POST", f"{API}/issues/42/labels")
        assert payload == {"labels": ["gradle-wrapper"]}
