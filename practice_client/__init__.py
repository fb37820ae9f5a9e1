"""Session controller, settings, logging and the PyQt6 window for practice sessions."""
