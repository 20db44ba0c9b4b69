import pytest

from socialcard.sizing import (
    MIN_SCALE,
    SCALE_STEPS,
    compute_scale,
    font_sizes,
    round_half_up,
    scale_for_units,
    text_units,
)

ALLOWED = {1.0, 0.9, 0.8, 0.72, 0.66, 0.6}


@pytest.mark.parametrize(
    "units, expected",
    [
        (0, 1.0),
        (160, 1.0),
        (160.0001, 0.9),
        (260, 0.9),
        (260.0001, 0.8),
        (360, 0.8),
        (360.5, 0.72),
        (460, 0.72),
        (461, 0.66),
        (560, 0.66),
        (560.0001, 0.6),
        (10_000, 0.6),
    ],
)
def test_scale_boundaries(units, expected):
    assert scale_for_units(units) == expected


def test_scale_is_non_increasing():
    previous = scale_for_units(0)
    for tenth in range(0, 8000):
        current = scale_for_units(tenth / 10)
        assert current in ALLOWED
        assert current <= previous
        previous = current


def test_title_counts_more_than_message():
    assert text_units("abcde", "") == pytest.approx(7.0)
    assert text_units("", "abcde") == 5
    assert compute_scale("Hi", "Welcome") == 1.0


def test_long_title_alone_drops_scale():
    # 300 * 1.4 = 420 units
    assert compute_scale("A" * 300, "") == 0.72


def test_font_sizes_at_each_step():
    expected = {
        1.0: (64, 46),
        0.9: (58, 41),
        0.8: (51, 37),
        0.72: (46, 33),
        0.66: (42, 30),
        0.6: (38, 28),
    }
    for scale in [s for _, s in SCALE_STEPS] + [MIN_SCALE]:
        assert font_sizes(scale) == expected[scale]


def test_minimum_sizes_stay_legible():
    title_px, body_px = font_sizes(MIN_SCALE)
    assert title_px >= 38
    assert body_px >= 27


def test_round_half_up():
    assert round_half_up(57.5) == 58
    assert round_half_up(30.5) == 31
    assert round_half_up(27.6) == 28
    assert round_half_up(86.4) == 86
