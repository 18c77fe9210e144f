"""HTTP API routes and models."""
