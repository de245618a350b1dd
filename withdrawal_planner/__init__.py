"""Tax-aware retirement withdrawal planning core.

The calculators live in :mod:`withdrawal_planner.calculators`; the base tax
tables they read are shipped in ``withdrawal_planner/data``.
"""

__version__ = "0.1.0"
