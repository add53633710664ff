"""
Payout Kernel - record normalization and validation core.

Pure, synchronous building blocks for turning upstream disbursement,
payment and receiver payloads into strict domain values:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Entity models, status workflows and the role catalogue
"""

__version__ = "0.1.0"
