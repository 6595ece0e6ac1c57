"""
pricewatch: monitoramento periódico de preços em e-commerces.
"""

__version__ = "1.0.0"
