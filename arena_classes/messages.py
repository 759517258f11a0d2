"""Fixed user-facing messages used when the portal supplies no text of its own."""

INTERNAL_ERROR = "An internal error occurred while talking to the catalog."
PROLONGING_IMPOSSIBLE = "This item cannot be renewed."
PROLONG_ALL_UNSUPPORTED = "Renewing all items at once is not possible in this catalog."
