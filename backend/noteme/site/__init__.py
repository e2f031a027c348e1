"""Static site generation from the NoteMe document (read-only consumer)."""
