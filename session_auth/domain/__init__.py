"""Domain-level policies for the credential lifecycle.

Rules here describe *what* counts as valid (e.g. an unexpired reset token),
independent from *where* they are enforced (services, repositories).
"""
