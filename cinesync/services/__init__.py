"""
Application services layer (use cases).

Services orchestrate the domain logic: filename parsing, subtitle
correlation, volume scanning, metadata enrichment, catalog
synchronisation and live file watching.

Services depend on ports (interfaces) from core/, never on concrete
implementations from adapters/.
"""
