"""HTTP query API for cohort memberships."""

from cohortline.api.app import create_app

__all__ = ["create_app"]
