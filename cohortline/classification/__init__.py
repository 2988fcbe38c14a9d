"""Customer classification and cohort queries."""

from cohortline.classification.classifier import Classifier
from cohortline.classification.service import CohortService

__all__ = ["Classifier", "CohortService"]
