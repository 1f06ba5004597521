"""
Clients for external services.
"""

from postimages.backend.client import GenerationBackendClient
