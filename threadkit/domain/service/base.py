"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the business rules that sit between callers and
    the storage contract.
    """

    pass
