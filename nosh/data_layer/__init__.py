"""Record models, text formats and file storage."""
