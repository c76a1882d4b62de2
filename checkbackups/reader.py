"""Roster CSV reader: turns class roster rows into StudentRecords."""

import csv
import io
import logging
import re
from pathlib import Path

from checkbackups import StudentRecord

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+00A0)
_WHITESPACE_RE = re.compile(r'\s+')

# Lines of class information above the student rows in the roster export
DEFAULT_SKIP = 8
DEFAULT_NAME_COLUMN = 1
DEFAULT_EMAIL_COLUMN = 2


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the CSV file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace into single spaces and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def parse_full_name(full_name: str) -> tuple[str, str]:
    """Split a roster name of the form "Last, First M." into (first, last).

    A trailing middle initial ("M.") is dropped.

    Raises:
        ValueError: If the name has no comma.
    """
    full_name = normalize_whitespace(full_name)
    if ',' not in full_name:
        raise ValueError(f"name {full_name!r} is not in 'Last, First' form")

    last, rest = full_name.split(',', 1)
    tokens = rest.split()
    if len(tokens) > 1 and tokens[-1].endswith('.') and len(tokens[-1]) <= 3:
        tokens = tokens[:-1]
    return ' '.join(tokens), last.strip()


def derive_username(email: str) -> str:
    """Return the local part of an email address, which is the login name.

    Raises:
        ValueError: If the address has no '@' or an empty local part.
    """
    email = email.strip()
    local, at, _ = email.partition('@')
    if not at or not local:
        raise ValueError(f"invalid email address '{email}'")
    return local


def _student_from_row(
    row: list[str],
    root: Path,
    name_index: int,
    email_index: int,
) -> StudentRecord:
    cells = [normalize_whitespace(c) for c in row]
    full_name = cells[name_index] if name_index < len(cells) else ''
    email = cells[email_index] if email_index < len(cells) else ''

    try:
        first, last = parse_full_name(full_name)
    except ValueError as exc:
        log.warning("Roster: %s", exc)
        first, last = '', full_name

    try:
        username = derive_username(email)
    except ValueError as exc:
        return StudentRecord(
            full_name=full_name, email=email, first_name=first, last_name=last,
            username='', home_dir=None, problem=str(exc),
        )

    return StudentRecord(
        full_name=full_name, email=email, first_name=first, last_name=last,
        username=username, home_dir=root / username,
    )


def read_roster(
    path: str | Path,
    root: str | Path,
    skip: int = DEFAULT_SKIP,
    name_column: int = DEFAULT_NAME_COLUMN,
    email_column: int = DEFAULT_EMAIL_COLUMN,
) -> list[StudentRecord]:
    """Read student records from a roster CSV export.

    The file has no header row; the first ``skip`` lines hold class
    information. Blank rows are ignored. Rows whose email cannot be turned
    into a username are kept, with ``problem`` set, so they still show up
    in the report.

    Args:
        path: Path to the roster CSV.
        root: Directory holding the student home directories.
        skip: Number of leading lines to ignore.
        name_column: 1-based column holding "Last, First M.".
        email_column: 1-based column holding the email address.

    Returns:
        List of StudentRecord in roster order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a column number is less than 1.
    """
    if name_column < 1 or email_column < 1:
        raise ValueError("Column numbers start at 1")

    path = Path(path)
    root = Path(root)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding, newline='') as f:
        content = f.read()

    # Strip BOM if present
    content = content.lstrip('\ufeff')
    lines = content.splitlines(keepends=True)[skip:]

    students: list[StudentRecord] = []
    for row in csv.reader(io.StringIO(''.join(lines))):
        if not any(cell.strip() for cell in row):
            continue
        students.append(_student_from_row(row, root, name_column - 1, email_column - 1))

    log.info("%d students read from %s", len(students), path)
    return students
