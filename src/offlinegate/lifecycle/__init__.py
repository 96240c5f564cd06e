"""Lifecycle — versioned cache generations, client sessions and control messages."""

from offlinegate.lifecycle.clients import ClientRegistry
from offlinegate.lifecycle.control import FORCE_ACTIVATE, ControlChannel
from offlinegate.lifecycle.generation import GenerationManager

__all__ = ["FORCE_ACTIVATE", "ClientRegistry", "ControlChannel", "GenerationManager"]
