from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.core.seen import SeenSet


def test_first_observation_only_sets_baseline():
    seen = SeenSet()
    assert seen.diff(["a", "b"]) == []
    seen.commit(["a", "b"])
    assert seen.has_baseline


def test_diff_reports_new_ids_in_order_without_duplicates():
    seen = SeenSet()
    seen.commit(["a", "b"])
    assert seen.diff(["c", "a", "d", "c", "b"]) == ["c", "d"]


def test_empty_baseline_differs_from_no_baseline():
    seen = SeenSet()
    seen.commit([])
    assert seen.diff(["x"]) == ["x"]


def test_removed_ids_are_not_reported_and_reset_clears_baseline():
    seen = SeenSet()
    seen.commit(["a", "b"])
    assert seen.diff(["a"]) == []
    seen.reset()
    assert not seen.has_baseline
    assert seen.diff(["z"]) == []
