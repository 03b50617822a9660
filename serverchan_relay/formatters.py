from dataclasses import dataclass

from .constants import ERRORS_HEADER, STATUS_LABELS, STATUS_OFFLINE, TITLE_MAX_LENGTH
from .utils import truncate, unix_to_datetime
from .validation import AlertRecord


@dataclass(frozen=True)
class NotificationRequest:
    title: str
    body: str

    def to_payload(self) -> dict:
        return {"title": self.title, "desp": self.body}


def is_offline(status):
    return status == STATUS_OFFLINE


def status_label(status):
    # Only the offline sentinel is recognised; everything else reads as recovered
    if is_offline(status):
        return STATUS_LABELS["offline"]
    return STATUS_LABELS["recovered"]


def build_title(record):
    return truncate(f"{record.name}已{status_label(record.status)}", TITLE_MAX_LENGTH)


def format_error_details(errors):
    lines = [f"\n\n{ERRORS_HEADER}"]
    for location in sorted(errors):
        lines.append(f"\n- {location}: {errors[location]}")
    return "".join(lines)


def build_body(record, location):
    label = status_label(record.status)
    datetime_text = unix_to_datetime(record.timestamp, location)
    body = f"{record.name} {record.category} {record.target}已于{datetime_text}{label}"

    if is_offline(record.status) and record.errors:
        body += format_error_details(record.errors)
    return body


def compose_notification(record: AlertRecord, location) -> NotificationRequest:
    return NotificationRequest(title=build_title(record), body=build_body(record, location))
