"""Release pipeline steps."""
