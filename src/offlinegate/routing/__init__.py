"""Routing — classify intercepted requests and dispatch them to strategies."""

from offlinegate.routing.classifier import classify, is_image_request, is_navigation_request
from offlinegate.routing.router import RequestRouter

__all__ = ["RequestRouter", "classify", "is_image_request", "is_navigation_request"]
