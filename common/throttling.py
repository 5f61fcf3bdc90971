"""Scoped throttle shared by the warehouse and portal APIs.

Reads the rate from Django settings at request time, so tests using
``override_settings`` reliably affect rates.
"""

from django.conf import settings
from rest_framework.throttling import ScopedRateThrottle


class SettingsScopedRateThrottle(ScopedRateThrottle):
    def get_rate(self):
        rf = getattr(settings, "REST_FRAMEWORK", {})
        rates = rf.get("DEFAULT_THROTTLE_RATES", {})
        return rates.get(self.scope)
