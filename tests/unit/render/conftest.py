"""Shared fixtures for renderer tests."""

from __future__ import annotations

import pytest

from layermark.config import RenderOptions


@pytest.fixture
def bare_options() -> RenderOptions:
    """HTML options that strip everything but the marked-up body text."""
    return RenderOptions(
        legend=False,
        titles=False,
        offset_attr=False,
        interactive=False,
    )


@pytest.fixture
def ansi_options() -> RenderOptions:
    """ANSI options without legend or titles."""
    return RenderOptions(format="ansi", legend=False, titles=False)
