"""Well-known event type constants.

Defined centrally so publishers and subscribers reference the same strings.
"""

# --- Controller events (controller → UI) ---------------------------------

JOKES_STATUS_CHANGED = "jokes.status.changed"
JOKES_LIST_CHANGED = "jokes.list.changed"
