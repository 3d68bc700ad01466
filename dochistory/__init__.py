"""Versioned document history: JSON patch history, reconstruction, and authenticity scoring."""
