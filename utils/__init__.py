"""
Carbonate chemistry and headspace mass-balance utilities.
"""
