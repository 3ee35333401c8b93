"""
Identity and access control application.

Provides:
- Email-based user identity with revocable bearer tokens
- Named roles holding named permissions
- Cached permission resolution per user
- Audit logging of access-control changes
"""
