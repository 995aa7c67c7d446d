"""Request dependencies shared by routes."""
