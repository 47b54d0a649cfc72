"""
Unit tests for SqlEnrollmentWriter duplicate handling

The database session is mocked; these tests check how insert outcomes are
classified, not SQL behavior.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from classmatch.services.enrollment_store import (
    SqlEnrollmentWriter,
    get_enrollment_writer,
    is_duplicate_key_error,
)


class FakeDriverError(Exception):
    """Stand-in for a DBAPI error carrying a SQLSTATE"""

    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def integrity_error(message, sqlstate=None):
    return IntegrityError("INSERT INTO enrollments ...", {}, FakeDriverError(message, sqlstate))


def mock_session_factory(commit_side_effect=None):
    """Patchable AsyncSessionLocal returning a session with async commit/rollback"""
    session = MagicMock()
    session.commit = AsyncMock(side_effect=commit_side_effect)
    session.rollback = AsyncMock()
    session.execute = AsyncMock()

    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory, session


class TestDuplicateDetection:
    """Test classification of IntegrityError"""

    def test_unique_violation_sqlstate(self):
        assert is_duplicate_key_error(integrity_error("boom", sqlstate="23505")) is True

    def test_duplicate_key_message(self):
        error = integrity_error(
            'duplicate key value violates unique constraint "uq_enrollments_student_class"'
        )
        assert is_duplicate_key_error(error) is True

    def test_foreign_key_violation_is_not_duplicate(self):
        error = integrity_error(
            'insert or update on table "enrollments" violates foreign key constraint',
            sqlstate="23503",
        )
        assert is_duplicate_key_error(error) is False


class TestInsertEnrollment:
    """Test insert outcomes"""

    @pytest.mark.asyncio
    async def test_insert_creates_row(self):
        factory, session = mock_session_factory()
        writer = SqlEnrollmentWriter()

        with patch("classmatch.services.enrollment_store.AsyncSessionLocal", factory):
            created = await writer.insert_enrollment(str(uuid.uuid4()), str(uuid.uuid4()))

        assert created is True
        session.add.assert_called_once()
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_is_no_op(self):
        factory, session = mock_session_factory(
            commit_side_effect=integrity_error("duplicate key value", sqlstate="23505")
        )
        writer = SqlEnrollmentWriter()

        with patch("classmatch.services.enrollment_store.AsyncSessionLocal", factory):
            created = await writer.insert_enrollment(str(uuid.uuid4()), str(uuid.uuid4()))

        assert created is False
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_integrity_errors_propagate(self):
        factory, _ = mock_session_factory(
            commit_side_effect=integrity_error("violates foreign key constraint", sqlstate="23503")
        )
        writer = SqlEnrollmentWriter()

        with patch("classmatch.services.enrollment_store.AsyncSessionLocal", factory):
            with pytest.raises(IntegrityError):
                await writer.insert_enrollment(str(uuid.uuid4()), str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_link_teachers_skips_empty(self):
        factory, session = mock_session_factory()
        writer = SqlEnrollmentWriter()

        with patch("classmatch.services.enrollment_store.AsyncSessionLocal", factory):
            assert await writer.link_teachers(str(uuid.uuid4()), []) == 0

        session.execute.assert_not_awaited()


def test_global_writer_is_reused():
    assert get_enrollment_writer() is get_enrollment_writer()
