"""
Update Ingestion

Modules:
- dates: Date expression normalizer
- message_parser: Parse LB_UPDATE_* messages for all games
- paste_mode: Paste-mode sync from terminal input
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "parse_message":
        from rankboard.ingestion.message_parser import parse_message
        return parse_message
    if name == "parse_date":
        from rankboard.ingestion.dates import parse_date
        return parse_date
    if name == "ingest_pasted_text":
        from rankboard.ingestion.paste_mode import ingest_pasted_text
        return ingest_pasted_text
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
