"""
shotboard.images - External image service adapter.

- handles: data-URI image handles
- prompts: generator prompt rendering
- client: litellm-backed generate/edit client
"""

from __future__ import annotations
