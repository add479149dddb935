"""
Mess Bill Calculator - Source Package

A shared-expense calculator for hostel and mess committees.
Members log meals, deposits, guest charges and fines for a billing
period; the calculator apportions food and overhead costs and reports
what each member still owes.

DESIGN PRINCIPLES:
1. The bill calculation is a pure function of its inputs
2. Fail early, fail visibly (no silent corrections)
3. Every user action is auditable
4. Storage and notification are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "Mess Calculator Team"
