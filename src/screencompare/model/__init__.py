"""
The MODEL layer contains pure data structures and geometry.
It has NO knowledge of the GUI (Qt) or the Visualization (PyVista).
It deals with screen specs, panel geometry and camera state.
"""
