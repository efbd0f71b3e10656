"""Path resolution and date parsing helpers."""
