"""
mgmt_access.auth

Authentication/authorization package.

Responsibilities:
- Select authentication clients and the default authorization generator from config.
- Compose them into an immutable access policy snapshot.
- FastAPI dependency that enforces the current snapshot.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Selection (`clients`, `generators`, `policy`) never touches HTTP; only `deps`
# and the CAS validator do.
