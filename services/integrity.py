"""
Referential integrity checks for SkillUp
Opt-in verification that *Id fields point at existing documents
"""

import logging

from utils.error_handler import IntegrityError

logger = logging.getLogger(__name__)


class ReferenceChecker:
    def __init__(self, store):
        self.store = store

    def check(self, refs):
        """
        Raise IntegrityError for the first reference whose target is missing
        """
        seen = set()
        for ref in refs:
            if ref in seen:
                continue
            seen.add(ref)

            if self.store.get_by_id(ref.collection, ref.id) is None:
                logger.warning(f"Dangling reference to {ref.collection}/{ref.id}")
                raise IntegrityError(f"Referenced {ref.collection} document '{ref.id}' does not exist", ref=ref)


def with_reference_checks(repository):
    """
    Attach a ReferenceChecker to every service of a repository
    """
    checker = ReferenceChecker(repository.store)
    for service in repository.services():
        service.reference_checker = checker
    return repository
