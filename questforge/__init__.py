"""
questforge: progression and economy engine.

Hosts build a ``questforge.engine.ProgressionEngine`` and drive characters
through it; everything below is wired from one balance catalogue.
"""

__version__ = "0.1.0"
