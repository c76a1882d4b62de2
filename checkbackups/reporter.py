"""Report generation for backup scores (console, CSV, HTML, summary)."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from checkbackups import MatchResult, ScoreReport

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'

CSV_COLUMNS = [
    'Last_Name',
    'First_Name',
    'Username',
    'Directory_Points',
    'Directory_Path',
    'Directory_Reason',
    'File_Points',
    'File_Path',
    'File_Created',
    'File_Reason',
    'Total_Points',
]


def describe_match(match: MatchResult) -> str:
    """One-line summary of a match: "points: path: reason"."""
    if match.path is None:
        return f"{match.points}: {match.reason}"
    return f"{match.points}: {match.path}: {match.reason}"


def _report_to_row(report: ScoreReport) -> dict:
    """Convert a ScoreReport to a flat dict for CSV/HTML output."""
    student = report.student
    dm = report.directory_match
    fm = report.file_match
    return {
        'Last_Name': student.last_name,
        'First_Name': student.first_name,
        'Username': student.username,
        'Directory_Points': str(dm.points),
        'Directory_Path': str(dm.path) if dm.path else '',
        'Directory_Reason': dm.reason,
        'File_Points': str(fm.points),
        'File_Path': str(fm.path) if fm.path else '',
        'File_Created': fm.created_at.isoformat(sep=' ', timespec='seconds')
        if fm.path and fm.created_at else '',
        'File_Reason': fm.reason,
        'Total_Points': str(report.total_points),
    }


def format_report(report: ScoreReport) -> str:
    """Render one student as a console block."""
    student = report.student
    return (
        f"{student.display_name} ({student.username or '?'}):\n"
        f"\tBackup Directory: {describe_match(report.directory_match)}\n"
        f"\tExported Assets:  {describe_match(report.file_match)}\n"
        f"\tTotal Points:     {report.total_points}"
    )


def print_reports(reports: list[ScoreReport]) -> None:
    """Print every student's result to stdout."""
    for report in reports:
        print(format_report(report))


def write_csv_report(reports: list[ScoreReport], output_path: Path) -> None:
    """Write scores as a CSV report, one row per student.

    Uses UTF-8 with BOM (utf-8-sig) so spreadsheet programs pick up the
    encoding.

    Args:
        reports: Score reports in roster order.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS, extrasaction='ignore')
        writer.writeheader()
        for report in reports:
            writer.writerow(_report_to_row(report))

    log.info("CSV report written: %s (%d rows)", output_path, len(reports))


def write_html_report(
    reports: list[ScoreReport],
    output_path: Path,
    title: str = '',
) -> None:
    """Write scores as an HTML report using Jinja2.

    Args:
        reports: Score reports in roster order.
        output_path: Path for the output HTML file.
        title: Report title, usually the assignment name.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    html = template.render(
        title=title,
        rows=[_report_to_row(r) for r in reports],
        stats=compute_stats(reports),
        columns=CSV_COLUMNS,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML report written: %s", output_path)


def compute_stats(reports: list[ScoreReport]) -> dict:
    """Compute summary statistics from score reports."""
    total = len(reports)
    directory_reasons = [r.directory_match.reason for r in reports]
    file_reasons = [r.file_match.reason for r in reports]
    points = [r.total_points for r in reports]

    return {
        'total': total,
        'exact_dir': directory_reasons.count('exact'),
        'tight_dir': directory_reasons.count('tight match'),
        'loose_dir': directory_reasons.count('loose match'),
        'minimal_dir': sum(1 for r in directory_reasons if r.startswith('minimal match')),
        'no_home': directory_reasons.count('home directory not found'),
        'no_dir': sum(1 for r in reports if not r.directory_match.found),
        'in_window': sum(1 for r in reports if r.file_match.points > 0),
        'early': sum(1 for r in file_reasons if r.endswith('(created before assigned)')),
        'late': sum(1 for r in file_reasons if r.endswith('(created after deadline)')),
        'average': round(sum(points) / total, 2) if total else 0.0,
    }


def print_summary(reports: list[ScoreReport], title: str = '') -> None:
    """Print a summary of score reports to stdout.

    Args:
        reports: Score reports.
        title: Assignment name.
    """
    stats = compute_stats(reports)

    print(f"\n=== Backup Report: {title} ===")
    print(f"Students:                  {stats['total']:>5}")
    print(f"Exact backup directory:    {stats['exact_dir']:>5}")
    print(f"Tight directory match:     {stats['tight_dir']:>5}")
    print(f"Loose directory match:     {stats['loose_dir']:>5}")
    print(f"Minimal directory match:   {stats['minimal_dir']:>5}")
    print(f"No backup directory:       {stats['no_dir']:>5}")
    print(f"  - home not found:        {stats['no_home']:>5}")
    print("---")
    print(f"Backups in window:         {stats['in_window']:>5}")
    print(f"  - created too early:     {stats['early']:>5}")
    print(f"  - created too late:      {stats['late']:>5}")
    print(f"Average points:            {stats['average']:>5}")
    print()
