"""Record store backends for Zyra."""


def build_store(settings):
    """Construct the record store named by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        from zyra.store.memory import MemoryStore
        return MemoryStore(
            activity_limit=settings.activity_log_limit,
            metrics_limit=settings.metrics_limit,
        )
    if settings.storage_backend == "sql":
        from zyra.common.database import DatabaseManager
        from zyra.store.sql import SQLStore
        return SQLStore(
            DatabaseManager(settings),
            activity_limit=settings.activity_log_limit,
            metrics_limit=settings.metrics_limit,
        )
    raise RuntimeError(f"Unknown storage backend: {settings.storage_backend!r}")
