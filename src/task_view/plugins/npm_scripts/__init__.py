"""npm scripts parser plugin."""

from .parser import NpmScriptsParser, locate_scripts

# Parser class exposed for provider discovery
PLUGIN_CLASS = NpmScriptsParser

__all__ = ["NpmScriptsParser", "PLUGIN_CLASS", "locate_scripts"]
