"""Feature modules of the LinguaDeck application."""
