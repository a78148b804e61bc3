from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.core.status import StatusCategory, classify, classify_studio


@pytest.mark.parametrize(
    ("raw", "category", "color"),
    [
        ("submitted", StatusCategory.PENDING, "yellow"),
        ("pending", StatusCategory.PENDING, "yellow"),
        ("running", StatusCategory.RUNNING, "blue"),
        ("completed", StatusCategory.SUCCEEDED, "green"),
        ("succeeded", StatusCategory.SUCCEEDED, "green"),
        ("success", StatusCategory.SUCCEEDED, "green"),
        ("failed", StatusCategory.FAILED, "red"),
        ("error", StatusCategory.FAILED, "red"),
    ],
)
def test_known_vocabulary(raw, category, color):
    result = classify(raw)
    assert result.category is category
    assert result.color == color


def test_matching_ignores_case_and_whitespace():
    result = classify("  RUNNING ")
    assert result.status == "running"
    assert result.category is StatusCategory.RUNNING
    assert result.shape == "ring"


@pytest.mark.parametrize("raw", ["cancelled", "unknown", "", None])
def test_anything_else_is_a_failure(raw):
    result = classify(raw)
    assert result.category is StatusCategory.FAILED
    assert result.category.is_terminal
    assert result.color == "grey"
    assert result.shape == "dot"


@pytest.mark.parametrize(
    ("raw", "category", "color"),
    [
        ("starting", StatusCategory.PENDING, "yellow"),
        ("building", StatusCategory.PENDING, "yellow"),
        ("stopping", StatusCategory.PENDING, "yellow"),
        ("RUNNING", StatusCategory.RUNNING, "blue"),
        ("stopped", StatusCategory.SUCCEEDED, "green"),
        ("errored", StatusCategory.FAILED, "red"),
        ("buildFailed", StatusCategory.FAILED, "red"),
        ("completed", StatusCategory.FAILED, "grey"),
        (None, StatusCategory.FAILED, "grey"),
    ],
)
def test_studio_vocabulary(raw, category, color):
    result = classify_studio(raw)
    assert result.category is category
    assert result.color == color
