"""nosh: a personal nutrition tracker built on plain-text food, recipe and journal files."""

APP_NAME = "nosh"
__version__ = "0.1.0"
