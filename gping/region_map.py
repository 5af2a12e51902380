"""Shorthands for cloud regions, such as ``aws:eu-west-1``."""

from __future__ import annotations


def try_host_from_cloud_region(query: str) -> str | None:
    """Return the hostname a cloud region shorthand stands for, or None."""
    provider, sep, region = query.partition(":")
    if not sep:
        return None
    if provider == "aws":
        return f"ec2.{region}.amazonaws.com"
    if provider == "gcp":
        if not region:
            return "cloud.google.com"
        return f"storage.{region}.rep.googleapis.com"
    return None