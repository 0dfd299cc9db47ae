"""
Report export - CSV serialization of the report collection.

Pure reader: takes report snapshots, returns text, touches no state.
"""

from typing import Iterable
import csv
import io

from app.models.report import Report


EXPORT_HEADERS = [
    "Report ID",
    "Reporter Name",
    "Contact Number",
    "Verified Account",
    "Incident Type",
    "Location/Landmark",
    "Description",
    "Priority Level",
    "Current Status",
    "Assigned Agency",
    "Date Created",
]


def report_to_row(report: Report) -> list:
    return [
        report.id,
        report.user_name,
        report.user_phone,
        "YES" if report.user_is_verified else "NO",
        report.incident_type.value.upper(),
        report.address_landmark,
        report.description,
        report.priority_level.value.upper(),
        report.current_status.value.upper(),
        report.assigned_agency.value,
        report.created_at.isoformat(),
    ]


def export_reports_csv(reports: Iterable[Report]) -> str:
    """Serialize reports to CSV with a header row. Fields are quoted where needed."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for report in reports:
        writer.writerow(report_to_row(report))
    return buffer.getvalue()
