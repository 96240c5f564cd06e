"""Concurrency — detached side-effect tasks and bounded request dispatch."""

from offlinegate.concurrency.detached import DetachedTasks
from offlinegate.concurrency.pool import RequestPool

__all__ = ["DetachedTasks", "RequestPool"]
