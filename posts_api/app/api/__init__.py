"""HTTP routes for the Posts API."""
