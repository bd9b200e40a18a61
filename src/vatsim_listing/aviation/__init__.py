from .airports import Airport, AirportDirectory, load_airports
from .geo import distance_km

__all__ = ["Airport", "AirportDirectory", "load_airports", "distance_km"]
