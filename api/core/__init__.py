"""
Shared, cross-cutting code for the API and the sync commands.

`core/` contains small building blocks that multiple features use
(DB wiring, settings, logging, the Legistar HTTP client). Keep feature-specific
SQL and business logic in the corresponding feature package (e.g. `officials/`).
"""
