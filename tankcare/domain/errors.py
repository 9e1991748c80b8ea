"""
Error taxonomy of the maintenance scheduler.

ValidationError and NotFoundError are caller mistakes (4xx-like).
TransientStoreError means "try again later" (5xx-like) and is never retried
inside the core. ConfigurationError is a systemic problem an operator has to
fix, e.g. a missing composite index for the due-schedule scan.
"""


class MaintenanceError(Exception):
    pass


class ValidationError(MaintenanceError, ValueError):
    pass


class NotFoundError(MaintenanceError, LookupError):
    pass


class ConfigurationError(MaintenanceError):
    pass


class MissingIndexError(ConfigurationError):
    def __init__(self, table: str, columns: tuple[str, ...], index_name: str):
        self.table = table
        self.columns = columns
        self.index_name = index_name
        super().__init__(
            f"Composite index {index_name} on {table}({', '.join(columns)}) is missing; "
            f"provision it (alembic upgrade head) before running the due-schedule scan"
        )


class TransientStoreError(MaintenanceError):
    pass
