import io

import pytest

from huhconv.progress import cadence, sampled_ranges, ProgressBar


def test_cadence_is_floored_at_one():
    assert cadence(0) == 1
    assert cadence(99) == 1
    assert cadence(10000) == 100


def test_ranges_cover_everything_once():
    covered = []
    for start, end in sampled_ranges(1234):
        covered.extend(range(start, end))
    assert covered == list(range(1234))


def test_ten_thousand_pixels():
    reports = []
    list(sampled_ranges(10000, reports.append))
    assert len(reports) == 100
    assert reports[0] == pytest.approx(0.01)
    assert reports[-1] == 1.0
    assert all(0.0 <= r <= 1.0 for r in reports)


def test_empty_range_reports_completion():
    reports = []
    assert list(sampled_ranges(0, reports.append)) == []
    assert reports == [1.0]


def test_failing_callback_propagates():
    def broken(_):
        raise BrokenPipeError()

    with pytest.raises(BrokenPipeError):
        list(sampled_ranges(500, broken))


def test_bar_drawing():
    stream = io.StringIO()
    bar = ProgressBar(stream, width=10, use_color=False)

    bar(0.5)
    assert stream.getvalue() == '\r[█████     ] 50.0%'

    bar(1.0)
    assert stream.getvalue().endswith('\r[██████████] 100.0%\n')
