"""
Utility modules for the Bark Lead Decoder.
"""
