"""Tests for offline progress calculation."""
import pytest

from cosmic_clicker.offline_progress import (
    calculate_offline_progress,
    format_offline_time,
    get_offline_progress_info,
    should_show_offline_popup,
)

HOUR_MS = 3600 * 1000
CAP_MS = 8 * HOUR_MS

def test_no_time_no_progress():
    assert calculate_offline_progress(5000, 5000, 10) == 0

def test_one_hour_at_ten_per_second():
    assert calculate_offline_progress(0, HOUR_MS, 10) == 18000

def test_result_is_floored():
    # 3 seconds * 1/s * 0.5 = 1.5
    assert calculate_offline_progress(0, 3000, 1) == 1

def test_clock_going_backwards_earns_nothing():
    assert calculate_offline_progress(HOUR_MS, 0, 10) == 0

def test_progress_is_monotonic_then_flat():
    previous = -1
    for minutes in range(0, 12 * 60, 15):
        earned = calculate_offline_progress(0, minutes * 60 * 1000, 3)
        assert earned >= previous
        previous = earned

    at_cap = calculate_offline_progress(0, CAP_MS, 3)
    assert calculate_offline_progress(0, CAP_MS + HOUR_MS, 3) == at_cap
    assert calculate_offline_progress(0, 10 * CAP_MS, 3) == at_cap

def test_cap_boundary():
    exactly = get_offline_progress_info(0, CAP_MS, 1)
    beyond = get_offline_progress_info(0, CAP_MS + 1000, 1)

    assert exactly['was_capped'] is False
    assert beyond['was_capped'] is True
    assert exactly['fuel_earned'] == beyond['fuel_earned'] == 14400

def test_progress_info_fields():
    info = get_offline_progress_info(0, 90 * 60 * 1000, 2)

    assert info == {
        'fuel_earned': 5400,
        'time_away': 5400.0,
        'time_away_display': '1 hour and 30 minutes',
        'was_capped': False,
    }

@pytest.mark.parametrize('seconds, expected', [
    (0, 'less than a minute'),
    (59, 'less than a minute'),
    (60, '1 minute'),
    (150, '2 minutes'),
    (3600, '1 hour'),
    (3660, '1 hour and 1 minute'),
    (7320, '2 hours and 2 minutes'),
    (86400, '1 day'),
    (90000, '1 day and 1 hour'),
    (2 * 86400 + 2 * 3600 + 59 * 60, '2 days and 2 hours'),
])
def test_format_offline_time(seconds, expected):
    assert format_offline_time(seconds) == expected

def test_popup_threshold():
    assert should_show_offline_popup(0, 59 * 1000) is False
    assert should_show_offline_popup(0, 60 * 1000) is True
    assert should_show_offline_popup(0, 10 * 1000, minimum_seconds=5) is True
