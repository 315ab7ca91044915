"""
Household Budget - Core Package

Deterministic building blocks behind a household budgeting app:
recurring transactions, dashboard widget layout and monthly
budget-vs-actual summaries.

DESIGN PRINCIPLES:
1. Pure functions for every calculation
2. Fail early, fail visibly
3. No ambient state (locale, currency and "today" are parameters)
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Budget Team"
