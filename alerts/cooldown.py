"""Per-rule cooldown tracking."""
from datetime import datetime, timedelta, timezone


def utc_now():
    return datetime.now(timezone.utc)


class CooldownTracker:
    """Remembers when each rule last fired and suppresses re-firing inside its cooldown."""

    def __init__(self, clock=None):
        self._clock = clock or utc_now
        self._last_fired = {}

    def is_in_cooldown(self, rule_id, cooldown_minutes):
        last = self._last_fired.get(rule_id)
        if last is None:
            return False
        return self._clock() - last < timedelta(minutes=cooldown_minutes)

    def record(self, rule_id, fired_at=None):
        self._last_fired[rule_id] = fired_at or self._clock()

    def last_fired(self, rule_id):
        return self._last_fired.get(rule_id)

    def reset(self, rule_id=None):
        if rule_id is None:
            self._last_fired.clear()
        else:
            self._last_fired.pop(rule_id, None)
