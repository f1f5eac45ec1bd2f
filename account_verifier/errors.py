from __future__ import annotations

from typing import List, Sequence, Tuple


class CsvImportError(Exception):
    """Whole-batch failure while importing a bulk CSV. No records survive it."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnreadableInputError(CsvImportError):
    pass


class EmptyInputError(CsvImportError):
    pass


class HeaderError(CsvImportError):
    def __init__(self, missing: Sequence[str]):
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Invalid CSV header. Missing required columns: {', '.join(self.missing)}."
        )


class RowStructureError(CsvImportError):
    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__(
            "Could not parse the CSV file due to formatting issues:\n\n"
            + "\n".join(self.errors)
        )


class DuplicateEntriesError(CsvImportError):
    def __init__(self, duplicates: Sequence[Tuple[str, str]]):
        self.duplicates: List[Tuple[str, str]] = list(duplicates)
        listed = "; ".join(f"Account {acc} at {bank}" for acc, bank in self.duplicates)
        super().__init__(
            "Duplicate entries found in the file. Please remove them and try again. "
            f"Duplicates: {listed}."
        )


class VerificationServiceError(Exception):
    """A single verification call failed; callers decide whether it is fatal."""
