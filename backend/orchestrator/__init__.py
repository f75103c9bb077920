from .submission import (
    GeneratedContent,
    SubmissionOrchestrator,
    SubmissionResult,
    client_folder_name,
    generate_content,
)

__all__ = [
    "GeneratedContent",
    "SubmissionOrchestrator",
    "SubmissionResult",
    "client_folder_name",
    "generate_content",
]
