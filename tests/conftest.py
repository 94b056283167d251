"""
Root pytest configuration and shared fixtures.

This file contains configuration and fixtures shared across all test types.
Directory-specific conftest.py files can override or extend these fixtures.
"""

import uuid

import pytest


@pytest.fixture
def guardian_id():
    return str(uuid.uuid4())


@pytest.fixture
def caregiver_id():
    return str(uuid.uuid4())
