"""Line protocol points and synchronous, retrying writes to InfluxDB 2."""

__version__ = "2.4.0"