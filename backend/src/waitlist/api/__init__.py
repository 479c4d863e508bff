"""HTTP API for the waitlist."""
