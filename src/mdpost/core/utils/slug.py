"""Slug generation for post paths and uploaded asset names"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def safe_filename(name: str) -> str:
    """Replace characters outside [A-Za-z0-9._-] with '-', keeping the extension."""
    return re.sub(r'[^a-zA-Z0-9._-]', '-', name)
