"""Fingerprint attendance package.

Organized by feature modules (scanner, fingerprints, attendance, reports, users)
with a thin Flask controller layer over service/repository layers.
"""
