"""Tests for byte-based progress tracking."""

from mrpack_convert.models import ManifestFile
from mrpack_convert.progress import ProgressState


def _files(*sizes):
    return [ManifestFile(path=f"mods/{i}.jar", downloads=["u"], fileSize=s) for i, s in enumerate(sizes)]


class TestProgressState:
    def test_begin_sums_sizes(self):
        state = ProgressState()
        state.begin(_files(100, 200, 300))
        assert state.total == 600
        assert state.downloaded == 0
        assert state.percent == 0

    def test_complete_reports(self):
        calls = []
        state = ProgressState(calls.append)
        state.begin(_files(100, 300))
        state.complete(100)
        state.complete(300)
        assert calls == [25, 100]

    def test_monotonic_without_total_reduction(self):
        calls = []
        state = ProgressState(calls.append)
        state.begin(_files(*([7] * 13)))
        for _ in range(13):
            state.complete(7)
        assert calls == sorted(calls)
        assert calls[-1] == 100

    def test_defer_does_not_report(self):
        calls = []
        state = ProgressState(calls.append)
        state.begin(_files(100, 100))
        state.defer(100)
        assert calls == []
        assert state.total == 100

    def test_fail_reports_against_reduced_total(self):
        calls = []
        state = ProgressState(calls.append)
        state.begin(_files(100, 100, 200))
        state.complete(100)
        state.fail(200)
        assert calls == [25, 50]

    def test_zero_total(self):
        calls = []
        state = ProgressState(calls.append)
        state.begin(_files(100))
        state.fail(100)
        assert calls == [0]

    def test_half_rounds_up(self):
        state = ProgressState()
        state.total = 200
        state.downloaded = 1
        assert state.percent == 1

    def test_no_callback(self):
        state = ProgressState()
        state.begin(_files(10))
        state.complete(10)
        assert state.percent == 100
