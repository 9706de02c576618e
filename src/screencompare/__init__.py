"""
Screen Compare
==============
Compare physical monitor configurations (size, resolution, viewing distance,
curvature) in a real-time 3D viewport.
"""
__version__ = "0.1.0"
