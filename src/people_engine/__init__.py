"""People engine: leave balances, public holiday compensation and offer totals."""

__version__ = "0.1.0"
