"""Shared fixtures: a small branch catalog and an in-memory enrollment store"""
from datetime import date
from typing import List, Optional, Set

import pytest

from classmatch.schemas import ClassOffering


class InMemoryEnrollmentWriter:
    """Enrollment store with a (student_id, class_id) uniqueness rule"""

    def __init__(self, fail_on: Optional[Set[str]] = None, fail_links: bool = False):
        self.rows = set()
        self.links = set()
        self.insert_attempts = 0
        self.fail_on = fail_on or set()
        self.fail_links = fail_links

    async def insert_enrollment(self, student_id: str, class_id: str) -> bool:
        self.insert_attempts += 1
        if class_id in self.fail_on:
            raise RuntimeError("connection reset by peer")
        pair = (student_id, class_id)
        if pair in self.rows:
            return False
        self.rows.add(pair)
        return True

    async def link_teachers(self, student_id: str, teacher_ids: List[str]) -> int:
        if self.fail_links:
            raise RuntimeError("student_teachers table unavailable")
        before = len(self.links)
        self.links.update((student_id, tid) for tid in teacher_ids)
        return len(self.links) - before


@pytest.fixture
def class_c1() -> ClassOffering:
    return ClassOffering(
        id="c1",
        branch_id="X",
        status="active",
        levels=["Level-1 (A)"],
        courses=["General English"],
        timing="Mon 9-11",
        start_date=date(2026, 1, 10),
        teacher_id="t-alice",
        teacher_name="Alice Haddad",
        program="English Program",
    )


@pytest.fixture
def class_c2() -> ClassOffering:
    return ClassOffering(
        id="c2",
        branch_id="X",
        status="active",
        levels=["Level-2"],
        courses=["Business English"],
        timing="Tue 9-11",
        start_date=date(2026, 1, 5),
        teacher_id="t-bob",
        teacher_name="Bob Karam",
        program="English Program",
    )


@pytest.fixture
def branch_catalog(class_c1, class_c2) -> List[ClassOffering]:
    """Branch X with two active classes"""
    return [class_c1, class_c2]


@pytest.fixture
def make_writer():
    """Factory for in-memory enrollment writers"""
    def _make(**kwargs) -> InMemoryEnrollmentWriter:
        return InMemoryEnrollmentWriter(**kwargs)
    return _make
