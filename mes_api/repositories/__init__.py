"""
Repository layer providing tenant-filtered data access per domain.
"""
