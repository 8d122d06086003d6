"""linkdeck: a tiny launcher backend."""
