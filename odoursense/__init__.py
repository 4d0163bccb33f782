"""
OdourSense: breath biomarker analysis backend.
"""
__version__ = "1.0.0"
