"""NiceGUI presentation layer for the joke list."""
