"""Read-only HTTP API over a built NSSP database."""
