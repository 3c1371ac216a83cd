"""
Moto Catalog - Catalog core.

Component catalog, model defaults, trim-level overrides, component
resolution, usage/deletion gating and completeness scoring.
"""
