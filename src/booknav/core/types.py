"""Core type definitions."""

from typing import NewType

# Absolute page URL as seen by the browser (e.g., "https://host/book/concepts/cps.html")
# Distinct from raw href attributes to catch comparison mistakes
PageURL = NewType("PageURL", str)

# Raw href attribute value as authored in the TOC (e.g., "concepts/cps.html")
Href = NewType("Href", str)
