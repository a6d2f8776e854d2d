"""Sitestage - permalinks and form delivery for static sites."""
