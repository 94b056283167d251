"""
Pytest configuration and fixtures for unit tests.

Unit tests are fast, isolated tests that don't require external dependencies.
The database is a Mock whose get_cursor() and transaction() both yield the
same mock cursor.
"""

from unittest.mock import Mock

import pytest


@pytest.fixture
def mock_cursor():
    """Mock cursor shared by get_cursor() and transaction()."""
    return Mock()


@pytest.fixture
def mock_database(mock_cursor):
    """Create a mock database."""
    db = Mock()
    db.get_cursor.return_value.__enter__ = Mock(return_value=mock_cursor)
    db.get_cursor.return_value.__exit__ = Mock(return_value=False)
    db.transaction.return_value.__enter__ = Mock(return_value=mock_cursor)
    db.transaction.return_value.__exit__ = Mock(return_value=False)
    return db


@pytest.fixture
def script_results(mock_cursor):
    """Queue one result per cursor.execute() call.

    Each result is ``(columns, rows)``; ``None`` stands for a statement that
    returns nothing. Executed statements are recorded on ``mock_cursor.executed``
    as ``(query, params)`` pairs.
    """
    mock_cursor.executed = []

    def _script(*results):
        queue = list(results)

        def execute(query, params=None):
            mock_cursor.executed.append((query, params))
            columns, rows = queue.pop(0) or ((), [])
            mock_cursor.description = [(column,) for column in columns]
            mock_cursor.fetchone.return_value = rows[0] if rows else None
            mock_cursor.fetchall.return_value = list(rows)
            mock_cursor.rowcount = len(rows)

        mock_cursor.execute.side_effect = execute

    return _script


@pytest.fixture
def mock_dispatcher():
    dispatcher = Mock()
    dispatcher.notify.return_value = True
    return dispatcher
