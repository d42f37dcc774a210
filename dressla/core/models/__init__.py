"""Domain enums and API I/O schemas shared across the marketplace."""
