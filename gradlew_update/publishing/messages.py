"""
messages.py — Nombres y textos que genera gradlew-update.

Todo lo que aparece en GitHub sale de aquí: nombre del branch,
mensaje del commit, título y descripción del PR, y el label.

Si no conocemos la versión origen (primera vez que se agrega el
wrapper, por ejemplo), los textos omiten el "from X".
"""

from __future__ import annotations

ISSUES_URL = "https://github.com/gradle-update/update-gradle-wrapper-action/issues"

BRANCH_PREFIX = "gradlew-update-"

LABEL_NAME = "gradle-wrapper"
LABEL_COLOR = "02303A"
LABEL_DESCRIPTION = "Pull requests that update Gradle wrapper"

BOT_NAME = "gradle-update-robot"
BOT_EMAIL = "gradle-update-robot@regolo.cc"


def branch_name(version: str) -> str:
    """gradlew-update-<version>"""
    return f"{BRANCH_PREFIX}{version}"


def branch_ref_name(version: str) -> str:
    """Ref relativo que se usa para buscar: heads/gradlew-update-<version>."""
    return f"heads/{branch_name(version)}"


def branch_full_ref(version: str) -> str:
    """Ref completo que se usa para crear: refs/heads/gradlew-update-<version>."""
    return f"refs/{branch_ref_name(version)}"


def release_notes_url(version: str) -> str:
    return f"https://docs.gradle.org/{version}/release-notes.html"


def _describe(verb: str, target_version: str, source_version: str | None) -> str:
    if source_version:
        return f"{verb} Gradle Wrapper from {source_version} to {target_version}."
    return f"{verb} Gradle Wrapper to {target_version}."


def commit_message(target_version: str, source_version: str | None = None) -> str:
    """
    Mensaje del commit: subject, línea en blanco, y el cuerpo con
    el link a las release notes.
    """
    subject = _describe("Update", target_version, source_version)
    return (
        f"{subject}\n"
        "\n"
        f"{subject}\n"
        f"- [Release notes]({release_notes_url(target_version)})"
    )


def pr_title(target_version: str, source_version: str | None = None) -> str:
    return _describe("Updates", target_version, source_version)


def pr_body(target_version: str, source_version: str | None = None) -> str:
    """Descripción del PR en markdown, con el footer de ayuda."""
    return f"""{pr_title(target_version, source_version)}

See release notes: {release_notes_url(target_version)}

---

<details>
<summary>Need help?</summary>
<br />

If something doesn't look right with this PR please file a bug [here]({ISSUES_URL}) 🙏
</details>"""
