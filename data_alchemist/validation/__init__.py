"""Row-level validation for the three datasets."""

from .validators import REQUIRED_COLUMNS, missing_columns, validate, validate_dataset

__all__ = [
    "REQUIRED_COLUMNS",
    "missing_columns",
    "validate",
    "validate_dataset",
]
