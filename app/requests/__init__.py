"""Request descriptors validated before any service call."""
