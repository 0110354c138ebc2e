"""
QuickPlanner - Source Package

The core of a personal organizer: weekly dinner planning driven by
calendar busyness, recipe document parsing, grocery list generation
and transaction imports.

DESIGN PRINCIPLES:
1. Parsing never aborts a batch because of one bad file or row
2. Planning is deterministic once a selector is injected
3. Every plan change is observable and auditable
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "QuickPlanner Team"
