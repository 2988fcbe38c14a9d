"""Cohortline: rule-based customer cohort classification.

Customer updates arrive from a message queue and from the customer table's
change stream. Both paths feed the same idempotent classifier, which writes
membership facts to the membership store.
"""

__version__ = "0.1.0"
