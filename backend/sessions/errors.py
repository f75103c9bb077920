"""Errors raised while checking or storing a questionnaire session.

Each carries the HTTP status and the client-facing message the API returns.
"""

from __future__ import annotations


class SubmissionError(Exception):
    status_code = 400
    message = "Failed to process submission"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidSessionTokenError(SubmissionError):
    status_code = 400
    message = "Invalid session token."


class SessionNotFoundError(SubmissionError):
    status_code = 404
    message = "Session not found."


class SessionNotEditableError(SubmissionError):
    status_code = 400
    message = "Session is no longer editable."


class SessionEmailMismatchError(SubmissionError):
    status_code = 403
    message = "Session email mismatch."


class StatusTransitionError(SubmissionError):
    status_code = 400
    message = "Session status cannot move backwards."


class PersistenceError(SubmissionError):
    status_code = 500
    message = "Failed to save your submission."
