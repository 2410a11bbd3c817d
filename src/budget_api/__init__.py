"""Budget tracker API."""
