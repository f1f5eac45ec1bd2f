"""
Bulk CSV import/export for account verification.

Responsibilities:
- upload decoding (encoding detection, BOM stripping)
- row tokenization with quoted fields
- header mapping + row width enforcement
- duplicate (account, bank) rejection
- result export in two layouts
"""

from __future__ import annotations

import csv
import io
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from charset_normalizer import from_bytes

from .errors import (
    DuplicateEntriesError,
    EmptyInputError,
    HeaderError,
    RowStructureError,
    UnreadableInputError,
)
from .models import AccountDetails, VerificationResult
from .rules import (
    ALL_RESULTS_EXPORT_COLUMNS,
    DELIMITER,
    DUPLICATE_KEY_SEPARATOR,
    QUOTE,
    REQUIRED_FIELDS,
    STATUS_FAILED,
    STATUS_SUCCESS,
    SUCCESSFUL_EXPORT_COLUMNS,
)

_LINE_SPLIT = re.compile(r"\r?\n")


def decode_upload(raw: bytes) -> str:
    """
    Decode uploaded bytes to text.

    Rules:
    - Empty payload is unreadable.
    - UTF-8 first; a UTF-8 BOM is stripped so it never leaks into the first header name.
    - Otherwise detect encoding best-effort via charset-normalizer.
    - Undetectable or undecodable bytes are unreadable.
    """
    if not raw:
        raise UnreadableInputError("Could not read the file.")

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    match = from_bytes(raw).best()
    if match is None:
        raise UnreadableInputError("Failed to read the file.")

    try:
        return raw.decode(match.encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise UnreadableInputError("Failed to read the file.") from exc


def tokenize_row(line: str, delimiter: str = DELIMITER, quote: str = QUOTE) -> List[str]:
    """Split one CSV line into trimmed cells, honouring quoted spans and doubled quotes."""
    values: List[str] = []
    current: List[str] = []
    in_quotes = False

    i = 0
    n = len(line)
    while i < n:
        char = line[i]
        if char == quote:
            if in_quotes and i + 1 < n and line[i + 1] == quote:
                current.append(quote)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    # unterminated quote: the rest of the line already sits in the current cell
    values.append("".join(current).strip())
    return values


def _non_blank_lines(text: str) -> List[str]:
    return [line for line in _LINE_SPLIT.split(text) if line.strip()]


def _duplicate_key(record: AccountDetails) -> Optional[str]:
    acc = record.accountNumber.strip()
    bank = record.bankName.strip()
    if not acc and not bank:
        return None
    return f"{acc}{DUPLICATE_KEY_SEPARATOR}{bank}".lower()


def find_duplicates(records: Iterable[AccountDetails]) -> List[Tuple[str, str]]:
    """Return every (account, bank) pair seen more than once, in first-seen order."""
    counts: Dict[str, int] = {}
    first_seen: Dict[str, Tuple[str, str]] = {}
    for record in records:
        key = _duplicate_key(record)
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + 1
        first_seen.setdefault(key, (record.accountNumber.strip(), record.bankName.strip()))
    return [first_seen[key] for key, count in counts.items() if count > 1]


def parse_accounts(text: str, required: Sequence[str] = REQUIRED_FIELDS) -> List[AccountDetails]:
    """
    Parse a bulk CSV into account records.

    All-or-nothing: a bad header, any malformed row or any duplicate
    (account, bank) pair rejects the whole file. Row numbers count non-blank
    lines only, with the header as row 1.
    """
    lines = _non_blank_lines(text)
    if len(lines) <= 1:
        raise EmptyInputError("CSV file is empty or contains only a header.")

    header = tokenize_row(lines[0])
    missing = [name for name in required if name not in header]
    if missing:
        raise HeaderError(missing)

    header_map: Dict[str, int] = {}
    for index, column in enumerate(header):
        header_map[column.strip()] = index

    records: List[AccountDetails] = []
    row_errors: List[str] = []

    for row_number, line in enumerate(lines[1:], start=2):
        cells = tokenize_row(line)
        if len(cells) != len(header):
            row_errors.append(
                f"Row {row_number}: Mismatched column count. "
                f"Expected {len(header)}, but found {len(cells)}."
            )
            continue

        values = {name: cells[header_map[name]] if name in header_map else "" for name in required}
        if not any(value.strip() for value in values.values()):
            continue
        records.append(AccountDetails(**values))

    if row_errors:
        raise RowStructureError(row_errors)

    duplicates = find_duplicates(records)
    if duplicates:
        raise DuplicateEntriesError(duplicates)

    return records


def _record_values(record: Optional[AccountDetails]) -> List[str]:
    if record is None:
        return ["", "", "", ""]
    return [record.beneficiaryName, record.bankName, record.accountNumber, record.bvn]


def serialize_successful(results: Sequence[VerificationResult]) -> Optional[str]:
    """
    Export verified records only. Returns None when nothing succeeded.

    Values are written as-is, without quoting.
    """
    successful = [r for r in results if r.success and r.data is not None]
    if not successful:
        return None

    rows = [DELIMITER.join(SUCCESSFUL_EXPORT_COLUMNS)]
    rows.extend(DELIMITER.join(_record_values(r.data)) for r in successful)
    return "\n".join(rows)


def serialize_all(results: Sequence[VerificationResult]) -> Optional[str]:
    """Export every outcome with status and message columns. Returns None for no results."""
    if not results:
        return None

    outp = io.StringIO(newline="")
    writer = csv.writer(outp, delimiter=DELIMITER, quotechar=QUOTE, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

    writer.writerow(ALL_RESULTS_EXPORT_COLUMNS)
    for r in results:
        writer.writerow(_record_values(r.data) + [STATUS_SUCCESS if r.success else STATUS_FAILED, r.message])

    # no terminator after the last row, same as the successful-only export
    return outp.getvalue()[:-1]
