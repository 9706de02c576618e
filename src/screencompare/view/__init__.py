"""
The VIEW layer: the main window and the PyVista viewport widget.
"""
