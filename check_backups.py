"""check-backups – CLI tool that scores students' Unity project backups."""

import argparse
import logging
from datetime import date
from pathlib import Path

from checkbackups import AssignmentWindow, ConfigError
from checkbackups.checker import BackupChecker, check_students
from checkbackups.patterns import (
    DEFAULT_BACKUP_DIR,
    DEFAULT_BACKUP_DIR_LOOSE_REGEX,
    DEFAULT_BACKUP_DIR_TIGHT_REGEX,
    DEFAULT_EXTENSION,
    DEFAULT_PROJECT_NAME,
    PatternSet,
)
from checkbackups.reader import (
    DEFAULT_EMAIL_COLUMN,
    DEFAULT_NAME_COLUMN,
    DEFAULT_SKIP,
    read_roster,
)
from checkbackups.reporter import print_reports, print_summary, write_csv_report, write_html_report

DEFAULT_ROOT = Path('//skhs04/Stusers')


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Find and score project backups in student home directories.',
        prog='check_backups.py',
    )
    parser.add_argument(
        '--root', type=Path, default=DEFAULT_ROOT,
        help=f'Root directory for student homes (default: {DEFAULT_ROOT})',
    )
    parser.add_argument(
        '--roster', required=True, type=Path,
        help='CSV file holding roster information',
    )
    parser.add_argument(
        '--output', required=True, type=Path,
        help='Where to write results as CSV, e.g. S1A1-U1L1-scores.csv',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Also write an HTML report next to the CSV',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Print summary counts to stdout',
    )
    parser.add_argument(
        '--assigned', required=True, type=_iso_date,
        help='ISO date on which the assignment was given (YYYY-MM-DD)',
    )
    parser.add_argument(
        '--due', type=_iso_date, default=date.today(),
        help='ISO date on which the assignment is due (default: today)',
    )
    parser.add_argument(
        '--skip', type=int, default=DEFAULT_SKIP,
        help=f'Number of class-information lines at the top of the roster (default: {DEFAULT_SKIP})',
    )
    parser.add_argument(
        '--name', type=int, default=DEFAULT_NAME_COLUMN,
        help='Column holding student names as "last, first mi" (default: 1)',
    )
    parser.add_argument(
        '--email', type=int, default=DEFAULT_EMAIL_COLUMN,
        help='Column holding student email addresses (default: 2)',
    )
    parser.add_argument(
        '--project', default=DEFAULT_PROJECT_NAME,
        help=f'Project name used in backup file names (default: {DEFAULT_PROJECT_NAME})',
    )
    parser.add_argument(
        '--backup-dir', default=DEFAULT_BACKUP_DIR,
        help=f'Expected backup folder name (default: {DEFAULT_BACKUP_DIR!r})',
    )
    parser.add_argument(
        '--tight-regex', default=DEFAULT_BACKUP_DIR_TIGHT_REGEX,
        help='Regex for near-miss backup folder names',
    )
    parser.add_argument(
        '--loose-regex', default=DEFAULT_BACKUP_DIR_LOOSE_REGEX,
        help='Regex for loosely named backup folders',
    )
    parser.add_argument(
        '--extension', default=DEFAULT_EXTENSION,
        help=f'Backup file extension (default: {DEFAULT_EXTENSION})',
    )
    parser.add_argument(
        '--jobs', type=int, default=1,
        help='Number of students checked in parallel (default: 1)',
    )
    parser.add_argument(
        '--timeout', type=float,
        help='Give up on a student after this many seconds',
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Provide detailed process trace',
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    if args.jobs < 1:
        parser.error('--jobs must be at least 1.')
    if args.timeout is not None and args.timeout <= 0:
        parser.error('--timeout must be positive.')

    try:
        window = AssignmentWindow.from_dates(args.assigned, args.due)
        patterns = PatternSet.build(
            due=args.due,
            project_name=args.project,
            backup_dir=args.backup_dir,
            tight_regex=args.tight_regex,
            loose_regex=args.loose_regex,
            extension=args.extension,
        )
    except ConfigError as exc:
        parser.error(str(exc))

    try:
        students = read_roster(args.roster, args.root, args.skip, args.name, args.email)
    except ValueError as exc:
        parser.error(str(exc))

    checker = BackupChecker(patterns, window)
    reports = check_students(students, checker, jobs=args.jobs, timeout=args.timeout)

    print_reports(reports)
    write_csv_report(reports, args.output)

    if args.html:
        write_html_report(reports, args.output.with_suffix('.html'), args.project)

    if args.summary:
        print_summary(reports, args.project)


if __name__ == '__main__':
    main()
