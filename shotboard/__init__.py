"""
Shotboard - script-to-storyboard image generation toolkit.

Splits a free-form script into shots, requests one generated image per shot
from an external image service, and lets the user regenerate or edit each
image: segmentation → batch generation → per-shot regenerate/edit.
"""

__version__ = "0.1.0"
