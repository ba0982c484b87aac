"""natded: interactive natural-deduction proof tree editing engine."""
__version__ = "0.4.0"
