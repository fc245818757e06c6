"""Feature modules of the RecallStack application."""
