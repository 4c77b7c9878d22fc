"""Unit tests for error kinds and store error translation."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from wikigraph.api.errors import classify
from wikigraph.core.errors import (
    ConflictError,
    ContentGraphError,
    NotFoundError,
    StoreFailure,
    ValidationError,
    VersionArticleMismatchError,
)
from wikigraph.db.session import translate_store_error


class FakeDriverError(Exception):
    """Driver exception carrying a SQLSTATE like asyncpg's."""

    def __init__(self, sqlstate: str | None):
        super().__init__(f"driver error {sqlstate}")
        self.sqlstate = sqlstate


class TestErrorHierarchy:
    """Tests for the error classes."""

    def test_not_found_message(self) -> None:
        article_id = uuid4()
        exc = NotFoundError("Article", article_id)

        assert str(exc) == f"Article {article_id} not found"
        assert exc.kind == "Article"
        assert exc.identifier == article_id

    def test_mismatch_is_both_not_found_and_validation(self) -> None:
        exc = VersionArticleMismatchError(uuid4(), uuid4())

        assert isinstance(exc, NotFoundError)
        assert isinstance(exc, ValidationError)
        assert "does not belong to article" in str(exc)

    @pytest.mark.parametrize(
        "error_type", [NotFoundError, ValidationError, ConflictError, StoreFailure]
    )
    def test_all_kinds_share_a_base(self, error_type: type) -> None:
        assert issubclass(error_type, ContentGraphError)


class TestTranslateStoreError:
    """Tests for translate_store_error."""

    def test_integrity_error_is_conflict(self) -> None:
        exc = IntegrityError("INSERT ...", {}, Exception("duplicate key"))
        assert isinstance(translate_store_error(exc), ConflictError)

    @pytest.mark.parametrize("sqlstate", ["40001", "40P01", "55P03"])
    def test_conflict_sqlstates(self, sqlstate: str) -> None:
        exc = DBAPIError("UPDATE ...", {}, FakeDriverError(sqlstate))
        assert isinstance(translate_store_error(exc), ConflictError)

    def test_other_errors_are_store_failures(self) -> None:
        exc = OperationalError("SELECT 1", {}, FakeDriverError("08006"))
        translated = translate_store_error(exc)

        assert isinstance(translated, StoreFailure)
        assert "OperationalError" in str(translated)


class TestHttpMapping:
    """Tests for the error kind to HTTP status mapping."""

    @pytest.mark.parametrize(
        ("exc", "status_code", "kind"),
        [
            (NotFoundError("Article", "x"), 404, "not_found"),
            (VersionArticleMismatchError(uuid4(), uuid4()), 404, "not_found"),
            (ValidationError("bad"), 400, "validation_error"),
            (ConflictError("race"), 409, "conflict"),
            (StoreFailure("down"), 503, "store_failure"),
            (ContentGraphError("other"), 500, "internal_error"),
        ],
    )
    def test_classify(self, exc: ContentGraphError, status_code: int, kind: str) -> None:
        assert classify(exc) == (status_code, kind)
