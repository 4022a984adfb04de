"""
Core proxy components:
- config: environment driven settings
- session / headers: upstream identity synthesis
- endpoints: raw proxy allowlist
- upstream: HTTP client for the merchant API
- operations: request shaping for the dedicated operations
"""
