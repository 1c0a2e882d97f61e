from .parser import COMMAND_EXAMPLES, NOT_UNDERSTOOD_MESSAGE, parse_command
from .preview import condition_matches, count_changed_rows, preview_command

__all__ = [
    "COMMAND_EXAMPLES",
    "NOT_UNDERSTOOD_MESSAGE",
    "parse_command",
    "condition_matches",
    "count_changed_rows",
    "preview_command",
]
