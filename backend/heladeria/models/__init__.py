from .catalog import Flavor, StoreFlavor
from .orders import Order, OrderItem

__all__ = [
    'Flavor', 'StoreFlavor',
    'Order', 'OrderItem',
]
