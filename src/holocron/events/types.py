"""Event type constants for Holocron."""

# Collection fetch lifecycle
COLLECTION_FETCH_STARTED = "collection_fetch_started"
COLLECTION_FETCH_SUCCEEDED = "collection_fetch_succeeded"
COLLECTION_FETCH_FAILED = "collection_fetch_failed"

# Single-item fetch lifecycle
ITEM_FETCH_STARTED = "item_fetch_started"
ITEM_FETCH_SUCCEEDED = "item_fetch_succeeded"
ITEM_FETCH_FAILED = "item_fetch_failed"

# UI transitions
SORT_CHANGED = "sort_changed"
ERRORS_CLEARED = "errors_cleared"
SELECTED_CLEARED = "selected_cleared"
CATALOG_RESET = "catalog_reset"
