"""Interactive command-line client for the portal assistant API."""
