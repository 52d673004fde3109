"""
Inventory CSV Import

FLOW OVERVIEW
- parse_csv_rows(text)
  • Split into rows of trimmed cells, drop blank rows, skip the header row.
- parse_flower_rows(text) / parse_hard_good_rows(text)
  • Map columns to row fields; empty numeric cells count as 0.
  • Bad values raise ValidationError naming the 1-based line of the file.
"""

import csv
import io

from .error_handlers import ValidationError
from .validators import MAX_INTEGER

FLOWER_COLUMNS = ('flower', 'color', 'stems_in_recipe', 'total_ordered', 'extras')
HARD_GOOD_COLUMNS = ('item', 'quantity')


def parse_csv_rows(text):
    """Return (line_number, cells) for every data row"""
    if not text or not text.strip():
        raise ValidationError('CSV file is empty')
    rows = []
    reader = csv.reader(io.StringIO(text))
    try:
        for line_number, cells in enumerate(reader, start=1):
            cells = [cell.strip() for cell in cells]
            if any(cells):
                rows.append((line_number, cells))
    except csv.Error as e:
        raise ValidationError(
            f"Row {reader.line_num}: {e}",
            details={'row': reader.line_num},
        )
    # First non-blank row is the header
    return rows[1:]


def _cell(cells, index):
    return cells[index] if index < len(cells) else ''


def _count(value, column, line_number):
    if value == '':
        return 0
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(
            f"Row {line_number}: {column} must be a whole number",
            details={'row': line_number, 'column': column, 'value': value},
        )
    if number < 0:
        raise ValidationError(
            f"Row {line_number}: {column} cannot be negative",
            details={'row': line_number, 'column': column, 'value': value},
        )
    if number > MAX_INTEGER:
        raise ValidationError(
            f"Row {line_number}: {column} is too large",
            details={'row': line_number, 'column': column, 'value': value},
        )
    return number


def _required(value, column, line_number):
    if not value:
        raise ValidationError(
            f"Row {line_number}: {column} is required",
            details={'row': line_number, 'column': column},
        )
    return value


def parse_flower_rows(text):
    parsed = []
    for line_number, cells in parse_csv_rows(text):
        parsed.append({
            'flower': _required(_cell(cells, 0), 'flower', line_number),
            'color': _cell(cells, 1),
            'stems_in_recipe': _count(_cell(cells, 2), 'stems_in_recipe', line_number),
            'total_ordered': _count(_cell(cells, 3), 'total_ordered', line_number),
            'extras': _count(_cell(cells, 4), 'extras', line_number),
        })
    return parsed


def parse_hard_good_rows(text):
    parsed = []
    for line_number, cells in parse_csv_rows(text):
        parsed.append({
            'item': _required(_cell(cells, 0), 'item', line_number),
            'quantity': _count(_cell(cells, 1), 'quantity', line_number),
        })
    return parsed
