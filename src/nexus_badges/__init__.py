"""
Nexus Badges -- download counters for your Nexus Mods, everywhere.

Fetch counts from Nexus, publish them to a private gist,
render shields.io badges that read the gist live.
Let GitHub Actions keep it fresh while you sleep.
"""

import os

__version__ = "0.1.0"
__author__ = "nexus-badges contributors"

BADGES_HOME = os.environ.get("NEXUS_BADGES_HOME", "io")
