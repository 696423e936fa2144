"""Startup validation — catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging

from config.settings import settings
from fitarc.models.plan import EatingMode
from fitarc.services.cadence import SPLIT_TAGS

logger = logging.getLogger(__name__)


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good)."""
    warnings: list[str] = []
    is_prod = settings.DATABASE_URL and "sqlite" not in settings.DATABASE_URL

    if is_prod and "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to * — restrict in production")

    if settings.DEFAULT_TRAINING_SPLIT not in SPLIT_TAGS:
        warnings.append(
            f"DEFAULT_TRAINING_SPLIT={settings.DEFAULT_TRAINING_SPLIT!r} is unknown — "
            "profiles without a split fall back to full_body"
        )

    if settings.DEFAULT_EATING_MODE not in {m.value for m in EatingMode}:
        warnings.append(
            f"DEFAULT_EATING_MODE={settings.DEFAULT_EATING_MODE!r} is unknown — "
            "meal templates fall back to the first one in the pool"
        )

    if settings.MAX_RANGE_DAYS < 1:
        warnings.append("MAX_RANGE_DAYS must be at least 1 — every range read will be rejected")

    if is_prod and not settings.SENTRY_DSN:
        warnings.append("SENTRY_DSN not set — error tracking disabled")

    for w in warnings:
        logger.warning("%s", w)

    if not warnings:
        logger.info("All startup checks passed")

    return warnings
