"""
Stack Attack
============

A falling-block arithmetic puzzle engine.

Expressions fall down a fixed-width grid; typing an answer removes the
matching item, and items that land stack into colored columns whose
same-color groups detonate when an equation of that color is solved.

All tunable parameters are in game_config.yaml and are read once when an
engine instance is constructed.
"""

__version__ = "1.0.0"
