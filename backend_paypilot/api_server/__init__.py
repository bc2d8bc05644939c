"""
API server package — HTTP interface over the risk and trust engine.

Thin FastAPI layer: parses requests, delegates to the service layer, maps
errors to status codes.
"""
