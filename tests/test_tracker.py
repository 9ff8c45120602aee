from lyric_keyframes.sync.tracker import UnitTracker
from lyric_keyframes.timing.model import Line


def _line(start: float, end: float) -> Line:
    return Line(start=start, end=end, text="x", char_ends=(1,), times=(end,))


def test_tracker_changed_only_on_change():
    tr = UnitTracker.from_units([_line(0.0, 0.8), _line(1.0, 1.8), _line(2.0, 2.8)])
    assert tr.changed_index(0.0) == 0
    assert tr.changed_index(0.01) is None
    assert tr.changed_index(0.999) is None
    assert tr.changed_index(1.0) == 1
    assert tr.changed_index(1.5) is None
    assert tr.changed_index(2.5) == 2


def test_tracker_before_first_unit():
    tr = UnitTracker.from_units([_line(3.0, 4.0)])
    assert tr.current_index(1.0) == -1
    assert tr.changed_index(1.0) is None  # already -1
    assert tr.current_index(99.0) == 0
