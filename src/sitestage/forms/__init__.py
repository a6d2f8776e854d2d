"""Form submission handling.

Submissions are delivered by named handlers held in a registry; the
processor runs the handlers configured for the site.
"""
