"""Body metric calculations."""
