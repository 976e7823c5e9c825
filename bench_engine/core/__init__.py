"""Backend-independent primitives (progress, cancellation, settings, hashing)."""
