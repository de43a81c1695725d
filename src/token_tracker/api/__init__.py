"""HTTP API for the Token Tracker service."""
