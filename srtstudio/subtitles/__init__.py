"""Subtitle workflows: correction, enhancement, regeneration and style transfer."""
