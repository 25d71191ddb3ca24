"""Cache key derivation, population and removal."""
