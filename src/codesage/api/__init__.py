"""CodeSage HTTP API."""
