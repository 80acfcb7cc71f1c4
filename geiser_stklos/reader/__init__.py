from geiser_stklos.reader.parser import lex, TokenStream, read_all, read_one, IncompleteInput
from geiser_stklos.reader.printer import write_string, display_string

__all__ = [
    "lex",
    "TokenStream",
    "read_all",
    "read_one",
    "IncompleteInput",
    "write_string",
    "display_string",
]
