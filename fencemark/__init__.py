"""
Fencemark

Multi-tenant fencing estimation API: organizations manage jobs, parcels,
fence/gate catalogs, pricing configurations, discounts, tax regions, map-drawn
fence segments and quotes, with every row scoped to its organization.
"""

__version__ = "1.0.0"
