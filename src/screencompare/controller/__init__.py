"""
The CONTROLLER layer turns screen lists, view modes and gestures into scene
and camera state. Only `viewport_engine` depends on Qt (for its timer and
signals); everything else is plain Python.
"""
