"""
mp_orders – order service with an in-process domain event bus.

Import path convention::

    from mp_orders.kernel.events import Event, EventType
    from mp_orders.application.events import EventService, InMemoryEventBus
    from mp_orders.application.orders import OrderService
    from mp_orders.adapters.fastapi import create_app
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
