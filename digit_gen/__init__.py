"""DIGIT module generator.

Renders a complete frontend module (screen configs, components, utilities,
service hooks, localization bundles and tests) from one declarative module
configuration.
"""

__version__ = "1.0.0"
