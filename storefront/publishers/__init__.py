"""
Publishers package
"""
from storefront.publishers.event_publisher import EventPublisher, get_event_publisher

__all__ = ["EventPublisher", "get_event_publisher"]
