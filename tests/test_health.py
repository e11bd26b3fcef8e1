"""
Health check - verify the postbridge package imports cleanly.
"""


def test_import_postbridge():
    """Test that postbridge package can be imported."""
    import postbridge
    assert postbridge.__version__ == "1.0.0"


def test_import_db_exports():
    """Test that the data-access surface is exported."""
    from postbridge.db import (
        DataAdapter,
        PostgrestClient,
        QueryBuilder,
        QueryResult,
        SingleResult,
        UnsupportedRealtimeChannel,
        get_client,
    )
    assert callable(get_client)
    assert PostgrestClient is not None


def test_intent_values():
    from postbridge.db.state import Intent, INTENT_PRECEDENCE
    assert Intent.READ.value == "read"
    assert INTENT_PRECEDENCE == (Intent.INSERT, Intent.UPDATE, Intent.DELETE)
