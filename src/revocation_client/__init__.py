"""
revocation_client — certificate revocation exchange with the Intune PKI connector service.

Downloads pending revocation requests issued by the service and uploads the
outcome of acting on them. Validation, envelope encoding and response
unwrapping happen locally; the HTTP transport is a pluggable port.

Built on the Railway-Oriented Programming (ROP) framework: every operation
returns a Result whose failure track carries a typed ErrorCode.
"""

__version__ = "0.1.0"
