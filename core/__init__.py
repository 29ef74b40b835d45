"""
Core Package

Contains the venue-agnostic core logic including:
- ExchangeInterface: Abstract base class defining the contract for all venue adapters
- Schemas: Pydantic models for the canonical trading data model (Market, Ticker, Order, etc.)
- Errors: Typed error taxonomy shared by every adapter
- Config / Logging: Settings loaded from .env and the centralized logger

Every adapter converts its venue's payloads into these schemas, so callers never
see a venue-specific shape.
"""
