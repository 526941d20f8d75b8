"""Infrastructure modules for the FreshTrack notification engine.

Centralized infrastructure components:
- configuration: Settings management (Settings and per-concern sections)
- logging: Structured logging (configure_logging, get_module_logger)
- operations: Operation results and error classification
- idempotency: Deduplication fingerprints
- notifications: Notification records, stores, channels and delivery worker
- persistence: Collaborator data access (hotels, users, batches, settings)
- services: Dependency injection providers (get_settings, SettingsDep)
"""
