"""Core domain, validation and polling for the CBS controller."""
