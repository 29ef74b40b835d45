"""
Exchange Adapters Package

This package contains individual venue adapter modules.
Each venue has its own subfolder with:
- config.py: Frozen venue configuration (URLs, versions, defaults)
- signer.py: Request building and authentication headers
- parsers.py: Response normalizers into core.schemas
- errors.py: Venue error classification
- __init__.py: Main exchange class implementing ExchangeInterface

Adapters only build requests and parse responses; transport lives outside.
"""
