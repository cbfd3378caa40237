"""
test_validators.py — Tests para parseo de reviewers y validaciones.
"""

from __future__ import annotations

import pytest

from gradlew_update.utils.validators import (
    parse_reviewers,
    validate_repository,
    validate_version,
)


class TestParseReviewers:
    def test_comas(self):
        assert parse_reviewers("alice,bob") == ["alice", "bob"]

    def test_mezcla_de_separadores(self):
        assert parse_reviewers("alice, bob\n  carol\tdave") == ["alice", "bob", "carol", "dave"]

    def test_vacio(self):
        assert parse_reviewers("") == []
        assert parse_reviewers(None) == []
        assert parse_reviewers(" \n , ") == []

    def test_mantiene_el_orden(self):
        assert parse_reviewers("zed\nalice") == ["zed", "alice"]


class TestValidateVersion:
    @pytest.mark.parametrize("version", ["7.0", "6.8.3", "7.0-rc-1", "8.0-milestone-2"])
    def test_versiones_validas(self, version):
        valido, error = validate_version(version)
        assert valido
        assert error == ""

    @pytest.mark.parametrize("version", ["", "   ", "7 0", "7.0~1", "7..0", "7.0:", ".7", "7.0.",
                                         "7.0#1", "7.0%1"])
    def test_versiones_invalidas(self, version):
        valido, error = validate_version(version)
        assert not valido
        assert error


class TestValidateRepository:
    def test_valido(self):
        assert validate_repository("gradle-update/update-gradle-wrapper-action") == (True, "")

    @pytest.mark.parametrize("repo", ["", None, "solo-nombre", "a/b/c", "owner/"])
    def test_invalido(self, repo):
        valido, error = validate_repository(repo)
        assert not valido
        assert error
