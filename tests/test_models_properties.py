"""
データモデルのプロパティベーステスト

Property 12: 同時更新でもカウンタの更新が失われない
"""

import dataclasses
import threading
from pathlib import Path

import pytest
from hypothesis import given, strategies as st
from hypothesis import settings

from image_copy_matcher.models import (
    OutcomeKind, RunOptions, RunSummary, summary_line
)


@settings(max_examples=30, deadline=None)
@given(outcomes=st.lists(st.sampled_from(list(OutcomeKind)), max_size=200),
       num_threads=st.integers(min_value=1, max_value=8))
def test_concurrent_record_property(outcomes, num_threads):
    """
    **Property 12: カウンタの原子性**

    任意の結果列を複数スレッドから同時に記録しても、各カウンタは
    結果の種類ごとの件数と一致し、合計は記録件数と一致するべきである。
    """
    summary = RunSummary(total=len(outcomes))
    chunks = [outcomes[i::num_threads] for i in range(num_threads)]

    def worker(chunk):
        for kind in chunk:
            summary.record(kind, error=("x", "boom") if kind is OutcomeKind.ERROR else None)

    threads = [threading.Thread(target=worker, args=(chunk,)) for chunk in chunks]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert summary.copied == outcomes.count(OutcomeKind.COPIED)
    assert summary.skipped == outcomes.count(OutcomeKind.SKIPPED)
    assert summary.missing == outcomes.count(OutcomeKind.MISSING)
    assert summary.failed == outcomes.count(OutcomeKind.ERROR)
    assert len(summary.errors) == summary.failed
    assert summary.done == len(outcomes) == summary.total


class TestModels:
    """データモデルの単体テスト"""

    def test_record_notifies_listener_with_snapshot(self):
        summary = RunSummary(total=2)
        seen = []

        summary.record(OutcomeKind.COPIED, seen.append)
        summary.record(OutcomeKind.MISSING, seen.append)

        assert [s.done for s in seen] == [1, 2]
        assert seen[-1].copied == 1
        assert seen[-1].missing == 1
        assert summary.snapshot() == seen[-1]

    def test_summary_line_format(self):
        summary = RunSummary(total=10, copied=4, missing=3, skipped=2, failed=1)

        assert summary_line(summary) == "Done. Copied: 4, Missing: 3, Skipped: 2, Errors: 1"

    def test_summary_line_cancelled(self):
        summary = RunSummary(total=3, copied=1, cancelled=True)

        assert summary_line(summary).endswith(" (cancelled)")

    def test_run_options_are_immutable(self):
        options = RunOptions(Path("/low"), Path("/hi"), Path("/dest"))

        with pytest.raises(dataclasses.FrozenInstanceError):
            options.overwrite = True

    def test_worker_count(self):
        assert RunOptions(None, None, None, max_workers=3).worker_count == 3
        assert RunOptions(None, None, None).worker_count >= 1
        assert RunOptions(None, None, None, max_workers=0).worker_count >= 1
