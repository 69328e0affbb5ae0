"""PostgreSQL chart catalog.

Charts for a PostgreSQL collector are declared as data (`Chart` objects)
rather than built ad hoc. This app contains the catalog, its validation, the
per-database chart lifecycle, and commands to inspect the catalog.
"""
