"""
Kernel layer: persistent models and identity.
"""
