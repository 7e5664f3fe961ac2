"""NoteMaster: staff-reading flashcard trainer core."""

__version__ = "0.1.0"
