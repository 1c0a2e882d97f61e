from .reader import SUPPORTED_EXTENSIONS, TableReadError, UnsupportedFileTypeError, read_rows, read_table
from .writer import RULES_FILE, WEIGHTS_FILE, export_all, write_dataset_csv, write_json

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "TableReadError",
    "UnsupportedFileTypeError",
    "read_rows",
    "read_table",
    "RULES_FILE",
    "WEIGHTS_FILE",
    "export_all",
    "write_dataset_csv",
    "write_json",
]
