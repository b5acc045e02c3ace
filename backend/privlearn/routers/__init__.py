from privlearn.routers import admin, events, health, ledger, modules

__all__ = [
    "admin",
    "events",
    "health",
    "ledger",
    "modules",
]
