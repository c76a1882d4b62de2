"""Tests for checkbackups.reader module."""

from pathlib import Path

import pytest

from checkbackups import StudentRecord
from checkbackups.reader import (
    derive_username,
    detect_encoding,
    normalize_whitespace,
    parse_full_name,
    read_roster,
)

CLASS_INFO = [
    'Class Roster',
    'Teacher,Smith',
    'Course,Game Design 1',
    'Period,3',
    'Term,S2',
    '',
    'Printed,2023-02-01',
    'Name,Email',
]


def _write_roster(path: Path, rows: list[str], encoding: str = 'utf-8') -> Path:
    path.write_text('\n'.join(CLASS_INFO + rows) + '\n', encoding=encoding)
    return path


class TestDetectEncoding:
    """Tests for encoding detection."""

    def test_utf16le_bom(self, tmp_path):
        f = tmp_path / 'roster.csv'
        f.write_bytes('\ufeffa,b\n'.encode('utf-16-le'))
        assert detect_encoding(f) == 'utf-16-le'

    def test_utf8_fallback(self, tmp_path):
        f = tmp_path / 'roster.csv'
        f.write_text('hello', encoding='utf-8')
        assert detect_encoding(f) == 'utf-8-sig'


class TestNormalizeWhitespace:
    """Tests for whitespace normalization."""

    def test_collapses_and_strips(self):
        assert normalize_whitespace('  Doe,  Jane ') == 'Doe, Jane'

    def test_empty_string(self):
        assert normalize_whitespace('') == ''


class TestParseFullName:
    """Tests for "Last, First M." splitting."""

    def test_middle_initial_dropped(self):
        assert parse_full_name('Doe, Jane Q.') == ('Jane', 'Doe')

    def test_plain_name(self):
        assert parse_full_name('Doe, Jane') == ('Jane', 'Doe')

    def test_two_first_names_kept(self):
        assert parse_full_name('Garcia Lopez, Mary Ann') == ('Mary Ann', 'Garcia Lopez')

    def test_single_abbreviated_first_name_kept(self):
        assert parse_full_name('Lee, Al.') == ('Al.', 'Lee')

    def test_no_comma_raises(self):
        with pytest.raises(ValueError, match='Last, First'):
            parse_full_name('Jane Doe')


class TestDeriveUsername:
    """Tests for username derivation from email."""

    def test_local_part(self):
        assert derive_username(' jdoe42@students.example.org ') == 'jdoe42'

    @pytest.mark.parametrize('email', ['jdoe', '@example.org', ''])
    def test_invalid(self, email):
        with pytest.raises(ValueError, match='invalid email'):
            derive_username(email)


class TestReadRoster:
    """Tests for reading roster CSV files."""

    def test_reads_students_after_class_info(self, tmp_path):
        f = _write_roster(tmp_path / 'roster.csv', [
            '"Doe, Jane Q.",jdoe@example.org',
            '"Roe, Richard",rroe@example.org',
        ])
        students = read_roster(f, tmp_path / 'homes')

        assert len(students) == 2
        jane = students[0]
        assert isinstance(jane, StudentRecord)
        assert (jane.first_name, jane.last_name, jane.username) == ('Jane', 'Doe', 'jdoe')
        assert jane.home_dir == tmp_path / 'homes' / 'jdoe'
        assert jane.problem is None
        assert students[1].display_name == 'Richard Roe'

    def test_custom_columns_and_skip(self, tmp_path):
        f = tmp_path / 'roster.csv'
        f.write_text('header\n1001,jdoe@example.org,"Doe, Jane"\n', encoding='utf-8')
        students = read_roster(f, '/homes', skip=1, name_column=3, email_column=2)
        assert students[0].username == 'jdoe'
        assert students[0].last_name == 'Doe'

    def test_blank_rows_ignored(self, tmp_path):
        f = _write_roster(tmp_path / 'roster.csv', [
            '"Doe, Jane",jdoe@example.org', '', ',', '"Roe, Richard",rroe@example.org',
        ])
        assert [s.username for s in read_roster(f, '/homes')] == ['jdoe', 'rroe']

    def test_bad_email_kept_with_problem(self, tmp_path):
        f = _write_roster(tmp_path / 'roster.csv', ['"Doe, Jane",jdoe'])
        student = read_roster(f, '/homes')[0]
        assert student.home_dir is None
        assert student.problem == "invalid email address 'jdoe'"

    def test_name_without_comma_kept(self, tmp_path):
        f = _write_roster(tmp_path / 'roster.csv', ['Jane Doe,jdoe@example.org'])
        student = read_roster(f, '/homes')[0]
        assert student.problem is None
        assert student.display_name == 'Jane Doe'

    def test_utf16_roster(self, tmp_path):
        f = tmp_path / 'roster.csv'
        content = '\n'.join(CLASS_INFO + ['"Müller, Jürgen",jmueller@example.org']) + '\n'
        f.write_bytes(('\ufeff' + content).encode('utf-16-le'))
        student = read_roster(f, '/homes')[0]
        assert student.last_name == 'Müller'
        assert student.username == 'jmueller'

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            read_roster('nonexistent.csv', '/homes')

    def test_column_numbers_start_at_one(self, tmp_path):
        f = _write_roster(tmp_path / 'roster.csv', [])
        with pytest.raises(ValueError, match='start at 1'):
            read_roster(f, '/homes', name_column=0)
