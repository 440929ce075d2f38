# Services package init
"""
Koalab Backend: Services Layer
===============================

Service Inventory:
    - SessionCodec:     signs and verifies session cookie values
    - IdentityVerifier: checks assertions with the remote verifier
    - store:            Collection adapters for boards, lines and postits
    - BoardService:     board and postit operations used by the routes
"""
