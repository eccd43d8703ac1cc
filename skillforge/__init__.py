"""
Skillforge - Skill Progression and Action-Resolution Engine

A generic engine that turns a "skill" (a leveling track with a catalog of
timed, randomized actions) into a consistent subsystem:
- Experience curves and level-ups
- Requirement gating and unlock propagation
- Success / critical-hit resolution and reward computation
- Save/load snapshots handed to an external storage transport

The engine is a library invoked in-process by a host application that
drives a periodic tick and drains notifications.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
