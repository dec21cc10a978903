"""
Access keys bounded context.

This module contains:
- The AccessKey entity and lifecycle rules
- The versioned key document store port and its adapters
- Application handlers for generate, verify, renew and cleanup
"""
