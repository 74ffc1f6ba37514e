"""Project templates: built-in defaults and the template catalogue API."""
