"""Offline progress: production earned while the game was closed.

Timestamps are epoch milliseconds; production rates are per second.
"""
import math

from cosmic_clicker.config import Config

def get_max_offline_seconds():
    """Longest absence that still earns production."""
    return Config.MAX_OFFLINE_HOURS * 3600

def get_elapsed_seconds(last_save_time, current_time):
    """Seconds between two timestamps (negative if the clock went backwards)."""
    return (current_time - last_save_time) / 1000

def calculate_offline_progress(last_save_time, current_time, production_per_second):
    """Fuel earned while away.

    Elapsed time is clamped to [0, MAX_OFFLINE_HOURS] and production runs
    at OFFLINE_PRODUCTION_MULTIPLIER of the online rate, floored.
    """
    elapsed = max(0.0, get_elapsed_seconds(last_save_time, current_time))
    capped = min(elapsed, get_max_offline_seconds())
    return math.floor(production_per_second * capped * Config.OFFLINE_PRODUCTION_MULTIPLIER)

def _plural(count, unit):
    return f"{count} {unit}{'s' if count != 1 else ''}"

def format_offline_time(seconds):
    """Human-readable duration for the welcome-back summary."""
    if seconds < 60:
        return 'less than a minute'

    minutes = math.floor(seconds / 60)
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        remaining_hours = hours % 24
        if remaining_hours > 0:
            return f"{_plural(days, 'day')} and {_plural(remaining_hours, 'hour')}"
        return _plural(days, 'day')

    if hours > 0:
        remaining_minutes = minutes % 60
        if remaining_minutes > 0:
            return f"{_plural(hours, 'hour')} and {_plural(remaining_minutes, 'minute')}"
        return _plural(hours, 'hour')

    return _plural(minutes, 'minute')

def get_offline_progress_info(last_save_time, current_time, production_per_second):
    """Offline award plus display details."""
    elapsed = get_elapsed_seconds(last_save_time, current_time)

    return {
        'fuel_earned': calculate_offline_progress(last_save_time, current_time, production_per_second),
        'time_away': elapsed,
        'time_away_display': format_offline_time(elapsed),
        # Exactly MAX_OFFLINE_HOURS is not capped
        'was_capped': elapsed > get_max_offline_seconds(),
    }

def should_show_offline_popup(last_save_time, current_time, minimum_seconds=None):
    """True if the player was away long enough to show the summary."""
    if minimum_seconds is None:
        minimum_seconds = Config.OFFLINE_POPUP_MIN_SECONDS
    return get_elapsed_seconds(last_save_time, current_time) >= minimum_seconds
