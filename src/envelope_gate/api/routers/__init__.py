"""
envelope_gate.api.routers

HTTP routers.
"""

# Package marker.
