"""Store implementations for customers and inquiries."""
