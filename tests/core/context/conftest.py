"""Shared fixtures for context assembly tests."""

import pytest

from context_pack.core.codec import CodeCodec
from context_pack.core.context import CandidateItem, PriorClass


@pytest.fixture
def make_item():
    """Factory for CandidateItem with test-friendly defaults."""

    def _make(
        path,
        content=None,
        *,
        prior_class=PriorClass.EXPLICIT,
        language="typescript",
        last_modified=None,
        artifact=None,
        id=None,
    ):
        return CandidateItem(
            path=path,
            content=content,
            prior_class=prior_class,
            language=language,
            last_modified=last_modified,
            artifact=artifact,
            id=id,
        )

    return _make


@pytest.fixture
def codec():
    return CodeCodec(clock=lambda: 1_700_000_000.0)
