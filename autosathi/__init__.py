"""AutoSathi - vehicle maintenance tracking backend"""

__version__ = "0.1.0"
