from __future__ import annotations


class DomainError(Exception):
    pass


class DomainValidationError(DomainError):
    pass


class DomainInvariantError(DomainError):
    pass


class DomainDependencyError(DomainError):
    pass


class IdentifierDecodeError(DomainValidationError):
    pass


class ChallengeFetchError(DomainDependencyError):
    pass


class SubmissionNotReadyError(DomainInvariantError):
    pass
