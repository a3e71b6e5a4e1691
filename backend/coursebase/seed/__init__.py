from coursebase.seed.errors import (
    IntegrityWarning,
    NotFoundError,
    ParseError,
    ResolutionError,
    SeedError,
    StorageError,
)
from coursebase.seed.seeder import SeedReport, Seeder
from coursebase.seed.verify import VerificationReport, verify_database

__all__ = [
    "IntegrityWarning",
    "NotFoundError",
    "ParseError",
    "ResolutionError",
    "SeedError",
    "StorageError",
    "SeedReport",
    "Seeder",
    "VerificationReport",
    "verify_database",
]
