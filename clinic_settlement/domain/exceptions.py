"""Domain-specific exceptions.

Business outcomes (unresolved fee rules, undefined percentages, split
mismatches, clamped prices) are reported as ``Issue`` values on results.
Exceptions here are reserved for inputs the engine cannot work with at all.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Input record is malformed or violates a data model constraint"""

    pass
