"""security/ -- HTTP security policy package for jwt-tutorial.

Layer rule: security/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/. api/ wires security/ into the FastAPI app,
not the other way around.
"""
