"""
PaisaPal - Source Package

A personal budgeting tool for students and young professionals.
Income and expenses are tagged with a category and a mood, budgets are
set per category per month, and saved items can auto-post on a schedule.

DESIGN PRINCIPLES:
1. All state lives in one snapshot on this device
2. Bad data degrades to defaults, it never crashes the app
3. Amounts are stored unsigned; signs are a display concern
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PaisaPal Team"
