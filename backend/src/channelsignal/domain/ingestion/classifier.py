"""Meeting classification from email subjects.

Subjects are matched against a fixed, ordered list of patterns. The first
matching rule decides the meeting type; subjects matching nothing are not
meetings.
"""

import re
from enum import Enum
from typing import Optional


class MeetingType(str, Enum):
    """Meeting taxonomy stored on Meeting.meeting_type."""
    QBR = "QBR"
    ANNUAL_REVIEW = "ANNUAL_REVIEW"
    WEEKLY_CHECKIN = "WEEKLY_CHECKIN"
    DEAL_REVIEW = "DEAL_REVIEW"
    OTHER = "OTHER"


_CADENCE_SUFFIX = r'(?:sync|check-?in|meeting|call)'

# Priority order matters: "Weekly deal review" is a WEEKLY_CHECKIN only if it
# says sync/check-in/meeting/call, otherwise it falls through to DEAL_REVIEW.
CLASSIFICATION_RULES: list[tuple[MeetingType, list[re.Pattern]]] = [
    (MeetingType.QBR, [
        re.compile(r'\bqbr\b', re.IGNORECASE),
        re.compile(r'\bquarterly\s+business\s+review\b', re.IGNORECASE),
    ]),
    (MeetingType.ANNUAL_REVIEW, [
        re.compile(r'\bannual\s+review\b', re.IGNORECASE),
        re.compile(r'\byearly\s+review\b', re.IGNORECASE),
    ]),
    (MeetingType.WEEKLY_CHECKIN, [
        re.compile(rf'\bweekly\s+{_CADENCE_SUFFIX}\b', re.IGNORECASE),
    ]),
    (MeetingType.DEAL_REVIEW, [
        re.compile(r'\bdeal\s+review\b', re.IGNORECASE),
        re.compile(r'\bpipeline\s+review\b', re.IGNORECASE),
    ]),
    (MeetingType.OTHER, [
        re.compile(rf'\bmonthly\s+{_CADENCE_SUFFIX}\b', re.IGNORECASE),
    ]),
]


def classify_meeting(subject: Optional[str]) -> Optional[MeetingType]:
    """Classify a subject line into a MeetingType, or None if it is not a meeting.

    Examples:
        "Q4 QBR with Acme Corp"     → MeetingType.QBR
        "Weekly sync - Team Update" → MeetingType.WEEKLY_CHECKIN
        "Monthly check-in"          → MeetingType.OTHER
        "Invoice #12345"            → None
    """
    if not subject:
        return None

    for meeting_type, patterns in CLASSIFICATION_RULES:
        if any(pattern.search(subject) for pattern in patterns):
            return meeting_type

    return None
