"""Infrastructure layer - external adapters."""
