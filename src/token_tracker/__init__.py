"""Token Tracker: per-user slot records with gap backfill."""
