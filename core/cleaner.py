from typing import List, Sequence

from core.errors import ConfigurationError

Row = List[str]


class RowCleaner:
    """
    Sanitizes decoded CSV rows to a fixed column count before typed parsing.

    Provider exports append trailing summary rows, blank lines or extra
    trailing columns inconsistently, so each caller picks the strictness
    that matches its export.
    """

    def __init__(self, expected_row_length: int):
        if expected_row_length < 1:
            raise ConfigurationError(
                "The expected row length must be a positive integer greater than zero",
                details={"expected_row_length": expected_row_length},
            )
        self.expected_row_length = expected_row_length

    def remove_empty_rows(self, rows: Sequence[Row]) -> List[Row]:
        return [row for row in rows if self.is_filled_row(row)]

    def remove_irregular_length_rows(self, rows: Sequence[Row]) -> List[Row]:
        return [row for row in rows if self.is_regular_length_row(row)]

    def remove_short_and_truncate_long_rows(self, rows: Sequence[Row]) -> List[Row]:
        return [list(row[: self.expected_row_length]) for row in rows if len(row) >= self.expected_row_length]

    def truncate_rows(self, rows: Sequence[Row]) -> List[Row]:
        return [list(row[: self.expected_row_length]) for row in rows]

    def is_regular_length_row(self, row: Sequence[str]) -> bool:
        return len(row) == self.expected_row_length

    @staticmethod
    def is_filled_row(row: Sequence[str]) -> bool:
        return any(cell.strip() for cell in row)
