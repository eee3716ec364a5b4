"""
Roster State Storage

Modules:
- state: Envelope encoding/decoding and last-write-wins merging
- file_store: Local file persistence for envelopes
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name in ("encode_state", "decode_state", "upsert_player"):
        from rankboard.storage import state
        return getattr(state, name)
    if name == "FileStateStore":
        from rankboard.storage.file_store import FileStateStore
        return FileStateStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
