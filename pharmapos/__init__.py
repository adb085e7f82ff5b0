"""PharmaPOS - pharmacy point-of-sale and inventory back end."""

__version__ = "1.0.0"
