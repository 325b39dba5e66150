"""User-facing connectors: console REPL and desktop notifications."""
