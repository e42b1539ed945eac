from .checklist_client import ChecklistClient, ChecklistClientError
from .submission_flow import SubmissionForm

__all__ = [
    "ChecklistClient",
    "ChecklistClientError",
    "SubmissionForm",
]
