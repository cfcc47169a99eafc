"""
Handlers package - One authentication strategy per auth mode.
"""

from nacos_watch.handlers.base_handler import BaseAuthHandler
from nacos_watch.handlers.anonymous_handler import AnonymousAuthHandler
from nacos_watch.handlers.token_handler import TokenAuthHandler
from nacos_watch.handlers.signature_handler import SignatureAuthHandler

__all__ = [
    'BaseAuthHandler',
    'AnonymousAuthHandler',
    'TokenAuthHandler',
    'SignatureAuthHandler',
]
