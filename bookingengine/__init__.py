"""
bookingengine - booking availability and timeslot scheduling engine.
"""

__version__ = "0.1.0"
