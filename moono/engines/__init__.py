"""
Progression engines: content, progress/gating and step interactions.
"""
