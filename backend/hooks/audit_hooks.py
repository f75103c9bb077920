"""Audit hooks: logs each processed submission for the audit trail."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def log_submission(
    client_folder: str,
    overall_score: int,
    total_systems: int,
    total_skills: int,
    automation_coverage: int,
    submitted_at: str,
    session_token: str | None = None,
) -> dict[str, Any]:
    """Record a processed submission.

    Returns the audit entry dict so callers (and tests) can inspect it.
    """
    entry = {
        "client_folder": client_folder,
        "overall_score": overall_score,
        "total_systems": total_systems,
        "total_skills": total_skills,
        "automation_coverage": automation_coverage,
        "submitted_at": submitted_at,
        "has_session": session_token is not None,
    }
    logger.info("Submission processed: %s", client_folder)
    logger.info("Overall Score: %d/100", overall_score)
    logger.info("Systems to build: %d", total_systems)
    logger.info("Skills generated: %d", total_skills)
    logger.info("Automation coverage: %d%%", automation_coverage)
    return entry
