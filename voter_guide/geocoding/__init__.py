"""
Geocoding collaborator client and result adaptation.
"""

from .proxy_client import GeocodingProxyClient
from .result_adapter import extract_community

__all__ = ['GeocodingProxyClient', 'extract_community']
